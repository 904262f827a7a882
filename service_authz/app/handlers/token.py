"""
Token request handler (RFC 6749, 3.2).
"""

from typing import Callable, Dict, List, Optional

from fastapi import Response

from shared.logging import set_client_context

from ..api.client import DecisionServiceClient, Options, split_certificate_path
from ..api.models import (
    Property,
    TokenAction,
    TokenFailReason,
    TokenParams,
    TokenResponse,
)
from ..spi.base import TokenRequestHandlerSpi
from ..web.basic_credentials import parse_client_credentials
from ..web.responses import (
    EndpointKind,
    dpop_nonce_headers,
    map_action,
    unsupported_grant_type,
)
from .base import BaseHandler, ErrorTranslator
from .properties import merge_properties, strip_reserved


CHALLENGE = 'Basic realm="token"'


class TokenRequestHandler(BaseHandler):
    """Handler for token requests.

    The resource owner password flow makes a second decision call to
    issue or refuse the token once the deployment authenticated the user.
    Token exchange and JWT bearer grants are handed to the deployment.
    """

    endpoint_name = "token"

    def __init__(self, client: DecisionServiceClient, spi: TokenRequestHandlerSpi, on_error: Optional[ErrorTranslator] = None):
        super().__init__(client, on_error)
        self.spi = spi

    async def handle(self, params: TokenParams, options: Options = None) -> Response:
        return await self.dispatch(self._process(params, options))

    async def _process(self, params: TokenParams, options: Options) -> Response:
        client_id, client_secret = parse_client_credentials(params.authorization)
        set_client_context(client_id)
        client_certificate, certificate_path = split_certificate_path(params.client_certificate_path)

        properties = strip_reserved(self.spi.get_properties())

        response = await self.client.token(
            params.parameters,
            client_id=client_id,
            client_secret=client_secret,
            client_certificate=client_certificate,
            client_certificate_path=certificate_path,
            properties=properties or None,
            dpop=params.dpop,
            htm=params.htm,
            htu=params.htu,
            options=options
        )

        action = response.action
        headers = dpop_nonce_headers(response.dpop_nonce)

        self.logger.info(
            "Token request processed",
            action=action,
            grant_type=response.grant_type
        )

        if action is TokenAction.INVALID_CLIENT:
            return map_action(
                EndpointKind.TOKEN, action, response.response_content,
                {**headers, "WWW-Authenticate": CHALLENGE}
            )

        if action is TokenAction.PASSWORD:
            return await self._handle_password(response, properties, headers, options)

        if action is TokenAction.TOKEN_EXCHANGE:
            return self._delegate(self.spi.token_exchange, response, headers)

        if action is TokenAction.JWT_BEARER:
            return self._delegate(self.spi.jwt_bearer, response, headers)

        return map_action(EndpointKind.TOKEN, action, response.response_content, headers)

    async def _handle_password(
        self,
        response: TokenResponse,
        properties: List[Property],
        headers: Dict[str, str],
        options: Options,
    ) -> Response:
        subject = self.spi.authenticate_user(response.username, response.password)

        if subject is None:
            fail_response = await self.client.token_fail(
                response.ticket, TokenFailReason.INVALID_RESOURCE_OWNER_CREDENTIALS, options=options
            )
            return map_action(
                EndpointKind.TOKEN_FAIL, fail_response.action, fail_response.response_content, headers
            )

        issue_response = await self.client.token_issue(
            response.ticket,
            subject,
            properties=merge_properties(response.properties, properties, response.grant_type) or None,
            options=options
        )

        return map_action(
            EndpointKind.TOKEN_ISSUE,
            issue_response.action,
            issue_response.response_content,
            dpop_nonce_headers(issue_response.dpop_nonce) or headers
        )

    def _delegate(
        self,
        callback: Callable[[TokenResponse], Optional[Response]],
        response: TokenResponse,
        headers: Dict[str, str],
    ) -> Response:
        result = callback(response)
        if result is None:
            return unsupported_grant_type(headers)

        return result
