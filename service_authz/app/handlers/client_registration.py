"""
Dynamic client registration handler (RFC 7591 and RFC 7592).
"""

from fastapi import Response

from ..api.client import (
    CLIENT_REGISTRATION_DELETE_PATH,
    CLIENT_REGISTRATION_GET_PATH,
    CLIENT_REGISTRATION_PATH,
    CLIENT_REGISTRATION_UPDATE_PATH,
    Options,
)
from ..api.models import ClientRegistrationParams
from ..web.basic_credentials import extract_access_token
from ..web.responses import EndpointKind, map_action
from .base import BaseHandler


class ClientRegistrationRequestHandler(BaseHandler):
    """Handler for client registration and client configuration requests.

    The Authorization header, when present, carries the initial access
    token (registration) or the registration access token (management).
    """

    endpoint_name = "client_registration"

    async def handle_register(self, params: ClientRegistrationParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(CLIENT_REGISTRATION_PATH, params, options))

    async def handle_get(self, params: ClientRegistrationParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(CLIENT_REGISTRATION_GET_PATH, params, options))

    async def handle_update(self, params: ClientRegistrationParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(CLIENT_REGISTRATION_UPDATE_PATH, params, options))

    async def handle_delete(self, params: ClientRegistrationParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(CLIENT_REGISTRATION_DELETE_PATH, params, options))

    async def _process(self, path: str, params: ClientRegistrationParams, options: Options) -> Response:
        response = await self.client.client_registration(
            params.json_body,
            token=extract_access_token(params.authorization),
            client_id=params.client_id,
            path=path,
            options=options
        )

        self.logger.info(
            "Client registration request processed",
            path=path,
            action=response.action,
            client_id=params.client_id
        )

        return map_action(EndpointKind.CLIENT_REGISTRATION, response.action, response.response_content)
