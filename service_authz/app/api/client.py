"""
Decision service client.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError as PydanticValidationError

from shared.config import ServiceConfig, get_config
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector

from ..errors import DecisionServiceError, UnknownActionError
from .models import (
    AuthorizationFailReason,
    AuthorizationFailResponse,
    AuthorizationIssueResponse,
    ClientRegistrationResponse,
    CredentialOfferInfoResponse,
    DecisionResponse,
    GMRequest,
    GMResponse,
    Parameters,
    Property,
    PushedAuthReqResponse,
    TokenFailReason,
    TokenFailResponse,
    TokenIssueResponse,
    TokenResponse,
    UserInfoIssueResponse,
    UserInfoResponse,
    action_type,
)


R = TypeVar("R", bound=DecisionResponse)

Options = Optional[Mapping[str, str]]


PUSHED_AUTH_REQ_PATH = "/pushed_auth_req"
GM_PATH = "/gm"
USERINFO_PATH = "/auth/userinfo"
USERINFO_ISSUE_PATH = "/auth/userinfo/issue"
CLIENT_REGISTRATION_PATH = "/client/registration"
CLIENT_REGISTRATION_GET_PATH = "/client/registration/get"
CLIENT_REGISTRATION_UPDATE_PATH = "/client/registration/update"
CLIENT_REGISTRATION_DELETE_PATH = "/client/registration/delete"
TOKEN_PATH = "/auth/token"
TOKEN_ISSUE_PATH = "/auth/token/issue"
TOKEN_FAIL_PATH = "/auth/token/fail"
AUTHORIZATION_ISSUE_PATH = "/auth/authorization/issue"
AUTHORIZATION_FAIL_PATH = "/auth/authorization/fail"
CREDENTIAL_OFFER_INFO_PATH = "/vci/offer/info"


def encode_parameters(parameters: Parameters) -> Optional[str]:
    """Flatten an ordered multi-valued mapping into a form-encoded string."""
    if parameters is None or isinstance(parameters, str):
        return parameters

    return urlencode(
        [(key, value) for key, values in parameters.items() for value in values]
    )


def split_certificate_path(path: Optional[Sequence[str]]):
    """Split a certificate chain into the client certificate and the rest."""
    if not path:
        return None, None

    rest = list(path[1:]) or None

    return path[0], rest


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


class DecisionServiceClient:
    """Client for communicating with the decision service.

    Every method performs exactly one POST and never retries; retry and
    timeout policy is configuration, not handler logic.
    """

    def __init__(
        self,
        base_url: str,
        service_id: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_id = service_id
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.transport = transport
        self.metrics = metrics or get_metrics_collector()
        self.logger = get_logger("authz.decision_client")

    @classmethod
    def from_config(cls, config: Optional[ServiceConfig] = None, **kwargs) -> "DecisionServiceClient":
        """Create a client from service configuration."""
        config = config or get_config()
        return cls(
            config.decision_service_url,
            service_id=config.decision_service_id,
            api_key=config.decision_api_key,
            api_secret=config.decision_api_secret,
            timeout=config.decision_timeout_seconds,
            **kwargs
        )

    def url_for(self, path: str) -> str:
        if self.service_id:
            return f"{self.base_url}/api/{self.service_id}{path}"
        return f"{self.base_url}/api{path}"

    async def call(
        self, path: str, payload: Dict[str, Any], model: Type[R], options: Options = None
    ) -> R:
        """POST ``payload`` to ``path`` and parse the reply into ``model``."""
        auth = None
        if self.api_key is not None:
            auth = (self.api_key, self.api_secret or "")

        with self.metrics.time_decision_call(path):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.post(
                        self.url_for(path),
                        json=_compact(payload),
                        headers=dict(options or {}),
                        auth=auth
                    )
            except httpx.HTTPError as e:
                self.logger.error("Decision service HTTP error", path=path, error=str(e))
                raise DecisionServiceError(
                    "Decision service unavailable",
                    details={"path": path, "http_error": str(e)}
                ) from e

            if response.status_code != 200:
                self.logger.error(
                    "Decision service returned an error status",
                    path=path,
                    status_code=response.status_code
                )
                raise DecisionServiceError(
                    f"{path} failed with status {response.status_code}",
                    details={"path": path, "status_code": response.status_code, "body": response.text}
                )

            return self.parse(path, response.text, model)

    def parse(self, path: str, text: str, model: Type[R]) -> R:
        """Parse a decision service reply, rejecting actions outside the model's set."""
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DecisionServiceError(
                f"{path} returned a body that is not JSON",
                details={"path": path}
            ) from e

        if not isinstance(data, dict):
            raise DecisionServiceError(
                f"{path} returned a JSON value that is not an object",
                details={"path": path}
            )

        action = data.get("action")
        known = {member.value for member in action_type(model)}
        if action not in known:
            raise UnknownActionError(path, action)

        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise DecisionServiceError(
                f"{path} returned a malformed response",
                details={"path": path, "errors": e.errors(include_url=False)}
            ) from e

    # -----------------------------------------------------------------------
    # APIs
    # -----------------------------------------------------------------------

    async def pushed_auth_req(
        self,
        parameters: Parameters,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        client_certificate: Optional[str] = None,
        client_certificate_path: Optional[List[str]] = None,
        dpop: Optional[str] = None,
        htm: Optional[str] = None,
        htu: Optional[str] = None,
        options: Options = None,
    ) -> PushedAuthReqResponse:
        payload = {
            "parameters": encode_parameters(parameters),
            "clientId": client_id,
            "clientSecret": client_secret,
            "clientCertificate": client_certificate,
            "clientCertificatePath": client_certificate_path,
            "dpop": dpop,
            "htm": htm,
            "htu": htu,
        }
        return await self.call(PUSHED_AUTH_REQ_PATH, payload, PushedAuthReqResponse, options)

    async def grant_management(self, request: GMRequest, options: Options = None) -> GMResponse:
        payload = {
            "accessToken": request.access_token,
            "gmAction": request.gm_action,
            "grantId": request.grant_id,
            "clientCertificate": request.client_certificate,
            "dpop": request.dpop,
            "htm": request.htm,
            "htu": request.htu,
        }
        return await self.call(GM_PATH, payload, GMResponse, options)

    async def userinfo(
        self,
        access_token: str,
        client_certificate: Optional[str] = None,
        dpop: Optional[str] = None,
        htm: Optional[str] = None,
        htu: Optional[str] = None,
        options: Options = None,
    ) -> UserInfoResponse:
        payload = {
            "token": access_token,
            "clientCertificate": client_certificate,
            "dpop": dpop,
            "htm": htm,
            "htu": htu,
        }
        return await self.call(USERINFO_PATH, payload, UserInfoResponse, options)

    async def userinfo_issue(
        self, access_token: str, claims: Optional[str] = None, options: Options = None
    ) -> UserInfoIssueResponse:
        payload = {"token": access_token, "claims": claims}
        return await self.call(USERINFO_ISSUE_PATH, payload, UserInfoIssueResponse, options)

    async def client_registration(
        self,
        json_body: Optional[str],
        token: Optional[str] = None,
        client_id: Optional[str] = None,
        path: str = CLIENT_REGISTRATION_PATH,
        options: Options = None,
    ) -> ClientRegistrationResponse:
        payload = {"json": json_body, "token": token, "clientId": client_id}
        return await self.call(path, payload, ClientRegistrationResponse, options)

    async def token(
        self,
        parameters: Parameters,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        client_certificate: Optional[str] = None,
        client_certificate_path: Optional[List[str]] = None,
        properties: Optional[List[Property]] = None,
        dpop: Optional[str] = None,
        htm: Optional[str] = None,
        htu: Optional[str] = None,
        options: Options = None,
    ) -> TokenResponse:
        payload = {
            "parameters": encode_parameters(parameters),
            "clientId": client_id,
            "clientSecret": client_secret,
            "clientCertificate": client_certificate,
            "clientCertificatePath": client_certificate_path,
            "properties": [p.model_dump() for p in properties] if properties else None,
            "dpop": dpop,
            "htm": htm,
            "htu": htu,
        }
        return await self.call(TOKEN_PATH, payload, TokenResponse, options)

    async def token_issue(
        self,
        ticket: str,
        subject: str,
        properties: Optional[List[Property]] = None,
        options: Options = None,
    ) -> TokenIssueResponse:
        payload = {
            "ticket": ticket,
            "subject": subject,
            "properties": [p.model_dump() for p in properties] if properties else None,
        }
        return await self.call(TOKEN_ISSUE_PATH, payload, TokenIssueResponse, options)

    async def token_fail(
        self, ticket: str, reason: TokenFailReason, options: Options = None
    ) -> TokenFailResponse:
        payload = {"ticket": ticket, "reason": reason.value}
        return await self.call(TOKEN_FAIL_PATH, payload, TokenFailResponse, options)

    async def authorization_issue(
        self,
        ticket: str,
        subject: str,
        auth_time: int = 0,
        acr: Optional[str] = None,
        claims: Optional[str] = None,
        properties: Optional[List[Property]] = None,
        scopes: Optional[List[str]] = None,
        options: Options = None,
    ) -> AuthorizationIssueResponse:
        payload = {
            "ticket": ticket,
            "subject": subject,
            "authTime": auth_time,
            "acr": acr,
            "claims": claims,
            "properties": [p.model_dump() for p in properties] if properties else None,
            "scopes": scopes,
        }
        return await self.call(AUTHORIZATION_ISSUE_PATH, payload, AuthorizationIssueResponse, options)

    async def authorization_fail(
        self, ticket: str, reason: AuthorizationFailReason, options: Options = None
    ) -> AuthorizationFailResponse:
        payload = {"ticket": ticket, "reason": reason.value}
        return await self.call(AUTHORIZATION_FAIL_PATH, payload, AuthorizationFailResponse, options)

    async def credential_offer_info(
        self, identifier: str, options: Options = None
    ) -> CredentialOfferInfoResponse:
        payload = {"identifier": identifier}
        return await self.call(CREDENTIAL_OFFER_INFO_PATH, payload, CredentialOfferInfoResponse, options)
