"""
UserInfo request handler (OpenID Connect Core 1.0, 5.3).

This flow makes two decision calls by contract: the first checks the
access token and lists the claims to release, the second issues the
userinfo payload built from the claims the deployment supplied.
"""

import json
from typing import Any, Dict, List, Optional

from fastapi import Response

from ..api.client import DecisionServiceClient, Options
from ..api.models import UserInfoAction, UserInfoParams
from ..spi.base import UserInfoRequestHandlerSpi
from ..web.responses import EndpointKind, bearer_error, dpop_nonce_headers, map_action
from .base import BaseHandler, ErrorTranslator


CHALLENGE_ON_MISSING_ACCESS_TOKEN = (
    'Bearer error="invalid_token",'
    'error_description="An access token must be sent as a Bearer Token. '
    'See OpenID Connect Core 1.0, 5.3.1. UserInfo Request for details."'
)


def collect_claims(
    spi: UserInfoRequestHandlerSpi, subject: str, claim_names: List[str]
) -> Optional[Dict[str, Any]]:
    """Ask the deployment for each claim; names may carry a ``#language`` suffix."""
    claims: Dict[str, Any] = {}

    for claim_name in claim_names:
        if not claim_name:
            continue

        name, _, tag = claim_name.partition("#")
        value = spi.get_user_claim(subject, name, tag or None)
        if value is None:
            continue

        claims[claim_name] = value

    return claims or None


class UserInfoRequestHandler(BaseHandler):
    """Handler for userinfo requests."""

    endpoint_name = "userinfo"

    def __init__(self, client: DecisionServiceClient, spi: UserInfoRequestHandlerSpi, on_error: Optional[ErrorTranslator] = None):
        super().__init__(client, on_error)
        self.spi = spi

    async def handle(
        self, params: UserInfoParams, options: Options = None, issue_options: Options = None
    ) -> Response:
        return await self.dispatch(self._process(params, options, issue_options))

    async def _process(self, params: UserInfoParams, options: Options, issue_options: Options) -> Response:
        if not params.access_token:
            return bearer_error(400, CHALLENGE_ON_MISSING_ACCESS_TOKEN)

        response = await self.client.userinfo(
            params.access_token,
            client_certificate=params.client_certificate,
            dpop=params.dpop,
            htm=params.htm,
            htu=params.htu,
            options=options
        )

        if response.action is not UserInfoAction.OK:
            return map_action(
                EndpointKind.USERINFO,
                response.action,
                response.response_content,
                dpop_nonce_headers(response.dpop_nonce)
            )

        claims = collect_claims(self.spi, response.subject, response.claims)

        issue_response = await self.client.userinfo_issue(
            params.access_token,
            claims=json.dumps(claims) if claims else None,
            options=issue_options
        )

        return map_action(
            EndpointKind.USERINFO_ISSUE,
            issue_response.action,
            issue_response.response_content,
            dpop_nonce_headers(issue_response.dpop_nonce or response.dpop_nonce)
        )
