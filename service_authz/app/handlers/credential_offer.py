"""
Credential offer URI handler (OpenID for Verifiable Credential Issuance).
"""

from fastapi import Response

from ..api.client import Options
from ..api.models import CredentialOfferInfoAction, CredentialOfferInfoRequest
from ..web.responses import EndpointKind, map_action
from .base import BaseHandler


class CredentialOfferUriRequestHandler(BaseHandler):
    """Serve the credential offer a ``credential_offer_uri`` points at."""

    endpoint_name = "credential_offer_uri"

    async def handle(self, request: CredentialOfferInfoRequest, options: Options = None) -> Response:
        return await self.dispatch(self._process(request, options))

    async def _process(self, request: CredentialOfferInfoRequest, options: Options) -> Response:
        response = await self.client.credential_offer_info(request.identifier, options=options)

        content = response.response_content
        if response.action is CredentialOfferInfoAction.OK:
            content = response.credential_offer

        return map_action(EndpointKind.CREDENTIAL_OFFER_INFO, response.action, content)
