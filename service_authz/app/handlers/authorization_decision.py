"""
Authorization decision handler.

Runs after the end-user has seen the consent page. The deployment tells
whether the client was authorized; the decision service then issues the
authorization response or the error response.
"""

import json
from typing import Any, Dict, List, Optional

from fastapi import Response

from ..api.client import DecisionServiceClient, Options
from ..api.models import AuthorizationDecisionParams, AuthorizationFailReason
from ..errors import PolicyViolationError
from ..spi.base import AuthorizationDecisionHandlerSpi
from ..web.responses import EndpointKind, map_action
from .base import BaseHandler, ErrorTranslator
from .properties import merge_properties


def collect_claims(
    spi: AuthorizationDecisionHandlerSpi, claim_names: List[str], claim_locales: List[str]
) -> Optional[Dict[str, Any]]:
    """Collect claim values, trying each requested locale before the default.

    Localized values are keyed ``name#locale``.
    """
    claims: Dict[str, Any] = {}

    for claim_name in claim_names:
        if not claim_name:
            continue

        name, _, tag = claim_name.partition("#")
        if tag:
            value = spi.get_user_claim(name, tag)
            if value is not None:
                claims[claim_name] = value
            continue

        for locale in claim_locales:
            value = spi.get_user_claim(name, locale)
            if value is not None:
                claims[f"{name}#{locale}"] = value
                break
        else:
            value = spi.get_user_claim(name, None)
            if value is not None:
                claims[name] = value

    return claims or None


class AuthorizationDecisionHandler(BaseHandler):
    """Handler for the end-user's authorization decision."""

    endpoint_name = "authorization_decision"

    def __init__(self, client: DecisionServiceClient, spi: AuthorizationDecisionHandlerSpi, on_error: Optional[ErrorTranslator] = None):
        super().__init__(client, on_error)
        self.spi = spi

    async def handle(self, params: AuthorizationDecisionParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(params, options))

    async def _process(self, params: AuthorizationDecisionParams, options: Options) -> Response:
        if not self.spi.is_client_authorized():
            return await self._fail(params.ticket, AuthorizationFailReason.DENIED, options)

        subject = self.spi.get_user_subject()
        if subject is None:
            raise PolicyViolationError(
                "The client was authorized but no subject was given for the end-user"
            )

        claims = collect_claims(self.spi, params.claim_names, params.claim_locales)
        properties = merge_properties([], self.spi.get_properties())

        response = await self.client.authorization_issue(
            params.ticket,
            subject,
            auth_time=self.spi.get_user_authenticated_at() or 0,
            acr=self.spi.get_acr(),
            claims=json.dumps(claims) if claims else None,
            properties=properties or None,
            scopes=self.spi.get_scopes(),
            options=options
        )

        return map_action(
            EndpointKind.AUTHORIZATION_ISSUE, response.action, response.response_content
        )

    async def _fail(self, ticket: str, reason: AuthorizationFailReason, options: Options) -> Response:
        response = await self.client.authorization_fail(ticket, reason, options=options)

        self.logger.info("Authorization denied", reason=reason.value, action=response.action)

        return map_action(
            EndpointKind.AUTHORIZATION_FAIL, response.action, response.response_content
        )
