"""
Pushed authorization request handler (RFC 9126).
"""

from fastapi import Response

from shared.logging import set_client_context

from ..api.client import Options, split_certificate_path
from ..api.models import PushedAuthReqParams, PushedAuthReqResponse
from ..web.basic_credentials import parse_client_credentials
from ..web.responses import EndpointKind, dpop_nonce_headers, map_action
from .base import BaseHandler


class PushedAuthReqHandler(BaseHandler):
    """Handler for pushed authorization requests."""

    endpoint_name = "pushed_auth_req"

    async def handle(self, params: PushedAuthReqParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(params, options))

    async def _process(self, params: PushedAuthReqParams, options: Options) -> Response:
        # client_secret_basic; both are None for other authentication methods.
        client_id, client_secret = parse_client_credentials(params.authorization)
        set_client_context(client_id)

        client_certificate, certificate_path = split_certificate_path(params.client_certificate_path)

        response: PushedAuthReqResponse = await self.client.pushed_auth_req(
            params.parameters,
            client_id=client_id,
            client_secret=client_secret,
            client_certificate=client_certificate,
            client_certificate_path=certificate_path,
            dpop=params.dpop,
            htm=params.htm,
            htu=params.htu,
            options=options
        )

        self.logger.info(
            "Pushed authorization request processed",
            action=response.action,
            client_id=client_id
        )

        return map_action(
            EndpointKind.PUSHED_AUTH_REQ,
            response.action,
            response.response_content,
            dpop_nonce_headers(response.dpop_nonce)
        )
