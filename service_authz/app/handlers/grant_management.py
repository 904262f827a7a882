"""
Grant management request handler (FAPI Grant Management).
"""

from fastapi import Response

from ..api.client import Options
from ..api.models import GMRequest
from ..web.responses import EndpointKind, dpop_nonce_headers, map_action
from .base import BaseHandler


class GMRequestHandler(BaseHandler):
    """Handler for grant management query and revocation requests."""

    endpoint_name = "grant_management"

    async def handle(self, request: GMRequest, options: Options = None) -> Response:
        return await self.dispatch(self._process(request, options))

    async def _process(self, request: GMRequest, options: Options) -> Response:
        response = await self.client.grant_management(request, options=options)

        return map_action(
            EndpointKind.GRANT_MANAGEMENT,
            response.action,
            response.response_content,
            dpop_nonce_headers(response.dpop_nonce)
        )
