"""
Base endpoints.

Thin glue turning a Starlette/FastAPI request into a handler envelope.
Applications subclass these inside their own routers; overriding
``on_error`` is the single place to add alerting or structured logging
for fatal errors. It runs once per failed request and cannot change the
response.
"""

from typing import List, Optional
from urllib.parse import parse_qs

from fastapi import Request, Response

from shared.logging import clear_context, set_request_id

from .api.client import DecisionServiceClient, Options
from .api.models import (
    AuthorizationDecisionParams,
    ClientRegistrationParams,
    CredentialOfferInfoRequest,
    GMRequest,
    PushedAuthReqParams,
    TokenParams,
    UserInfoParams,
)
from .errors import HandlerError
from .handlers import (
    AuthorizationDecisionHandler,
    ClientRegistrationRequestHandler,
    CredentialOfferUriRequestHandler,
    GMRequestHandler,
    PushedAuthReqHandler,
    TokenRequestHandler,
    UserInfoRequestHandler,
    log_error,
)
from .spi import (
    AuthorizationDecisionHandlerSpi,
    TokenRequestHandlerSpi,
    UserInfoRequestHandlerSpi,
)
from .web import certificates
from .web.basic_credentials import extract_access_token


async def read_body(request: Request) -> str:
    """Request body as text. Invalid UTF-8 is replaced, leaving the verdict to the decision service."""
    body = await request.body()
    return body.decode("utf-8", errors="replace")


async def read_form_body(request: Request) -> str:
    """Raw ``application/x-www-form-urlencoded`` body, passed on unparsed."""
    return await read_body(request)


class BaseEndpoint:
    """Base class of endpoints."""

    def bind_request_context(self, request: Optional[Request] = None) -> str:
        """Start a fresh logging context keyed by the caller's ``X-Request-Id``.

        A new id is generated when there is no request or no header.
        """
        clear_context()
        request_id = request.headers.get("X-Request-Id") if request is not None else None
        return set_request_id(request_id)

    def on_error(self, error: HandlerError) -> None:
        """Called when a handler hit a fatal error. Default: log it."""
        log_error(error)

    def extract_client_certificate_chain(self, request: Request) -> List[str]:
        return certificates.extract_client_certificate_chain(request)

    def extract_client_certificate(self, request: Request) -> Optional[str]:
        return certificates.extract_client_certificate(request)

    def dpop_fields(self, request: Request) -> dict:
        return {
            "dpop": request.headers.get("DPoP"),
            "htm": request.method,
            "htu": str(request.url.replace(query="", fragment="")),
        }


class BasePushedAuthReqEndpoint(BaseEndpoint):
    """Pushed authorization request endpoint."""

    async def handle(
        self, client: DecisionServiceClient, request: Request, options: Options = None
    ) -> Response:
        self.bind_request_context(request)

        params = PushedAuthReqParams(
            parameters=await read_form_body(request),
            authorization=request.headers.get("Authorization"),
            client_certificate_path=self.extract_client_certificate_chain(request) or None,
            **self.dpop_fields(request)
        )

        handler = PushedAuthReqHandler(client, on_error=self.on_error)
        return await handler.handle(params, options)


class BaseTokenEndpoint(BaseEndpoint):
    """Token endpoint."""

    async def handle(
        self,
        client: DecisionServiceClient,
        spi: TokenRequestHandlerSpi,
        request: Request,
        options: Options = None,
    ) -> Response:
        self.bind_request_context(request)

        params = TokenParams(
            parameters=await read_form_body(request),
            authorization=request.headers.get("Authorization"),
            client_certificate_path=self.extract_client_certificate_chain(request) or None,
            **self.dpop_fields(request)
        )

        handler = TokenRequestHandler(client, spi, on_error=self.on_error)
        return await handler.handle(params, options)


class BaseUserInfoEndpoint(BaseEndpoint):
    """UserInfo endpoint.

    The access token is taken from the Authorization header, falling back
    to the ``access_token`` form or query parameter (RFC 6750, 2.2/2.3).
    """

    async def handle(
        self,
        client: DecisionServiceClient,
        spi: UserInfoRequestHandlerSpi,
        request: Request,
        options: Options = None,
        issue_options: Options = None,
    ) -> Response:
        self.bind_request_context(request)

        access_token = extract_access_token(request.headers.get("Authorization"))
        if access_token is None:
            access_token = request.query_params.get("access_token")
        if access_token is None and request.method == "POST":
            form = parse_qs(await read_form_body(request))
            access_token = (form.get("access_token") or [None])[0]

        params = UserInfoParams(
            access_token=access_token,
            client_certificate=self.extract_client_certificate(request),
            **self.dpop_fields(request)
        )

        handler = UserInfoRequestHandler(client, spi, on_error=self.on_error)
        return await handler.handle(params, options, issue_options)


class BaseGrantManagementEndpoint(BaseEndpoint):
    """Grant management endpoint (GET to query, DELETE to revoke)."""

    async def handle(
        self,
        client: DecisionServiceClient,
        request: Request,
        grant_id: Optional[str],
        options: Options = None,
    ) -> Response:
        self.bind_request_context(request)

        gm_action = "REVOKE" if request.method == "DELETE" else "QUERY"

        gm_request = GMRequest(
            access_token=extract_access_token(request.headers.get("Authorization")),
            gm_action=gm_action,
            grant_id=grant_id,
            client_certificate=self.extract_client_certificate(request),
            **self.dpop_fields(request)
        )

        handler = GMRequestHandler(client, on_error=self.on_error)
        return await handler.handle(gm_request, options)


class BaseClientRegistrationEndpoint(BaseEndpoint):
    """Dynamic client registration and client configuration endpoints."""

    def _handler(self, client: DecisionServiceClient) -> ClientRegistrationRequestHandler:
        return ClientRegistrationRequestHandler(client, on_error=self.on_error)

    async def handle_register(
        self, client: DecisionServiceClient, request: Request, options: Options = None
    ) -> Response:
        self.bind_request_context(request)

        params = ClientRegistrationParams(
            json_body=await read_body(request),
            authorization=request.headers.get("Authorization"),
        )
        return await self._handler(client).handle_register(params, options)

    async def handle_get(
        self, client: DecisionServiceClient, request: Request, client_id: str, options: Options = None
    ) -> Response:
        self.bind_request_context(request)

        params = ClientRegistrationParams(
            client_id=client_id,
            authorization=request.headers.get("Authorization"),
        )
        return await self._handler(client).handle_get(params, options)

    async def handle_update(
        self, client: DecisionServiceClient, request: Request, client_id: str, options: Options = None
    ) -> Response:
        self.bind_request_context(request)

        params = ClientRegistrationParams(
            json_body=await read_body(request),
            client_id=client_id,
            authorization=request.headers.get("Authorization"),
        )
        return await self._handler(client).handle_update(params, options)

    async def handle_delete(
        self, client: DecisionServiceClient, request: Request, client_id: str, options: Options = None
    ) -> Response:
        self.bind_request_context(request)

        params = ClientRegistrationParams(
            client_id=client_id,
            authorization=request.headers.get("Authorization"),
        )
        return await self._handler(client).handle_delete(params, options)


class BaseAuthorizationDecisionEndpoint(BaseEndpoint):
    """Endpoint receiving the end-user's decision on the consent page."""

    async def handle(
        self,
        client: DecisionServiceClient,
        spi: AuthorizationDecisionHandlerSpi,
        params: AuthorizationDecisionParams,
        options: Options = None,
        request: Optional[Request] = None,
    ) -> Response:
        self.bind_request_context(request)

        handler = AuthorizationDecisionHandler(client, spi, on_error=self.on_error)
        return await handler.handle(params, options)


class BaseCredentialOfferUriEndpoint(BaseEndpoint):
    """Endpoint serving credential offers by reference."""

    async def handle(
        self,
        client: DecisionServiceClient,
        identifier: str,
        options: Options = None,
        request: Optional[Request] = None,
    ) -> Response:
        self.bind_request_context(request)

        handler = CredentialOfferUriRequestHandler(client, on_error=self.on_error)
        return await handler.handle(CredentialOfferInfoRequest(identifier=identifier), options)
