"""
Request envelopes and decision service response models.

Envelopes are built once by endpoint glue and are frozen; use
``model_copy(update=...)`` to derive a variant. Response models mirror the
decision service's JSON (camelCase on the wire).
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Parameters = Union[str, Dict[str, List[str]], None]


class Property(BaseModel):
    """An extra property associated with a token or authorization code."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any = None
    hidden: bool = False


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class PushedAuthReqAction(str, Enum):
    """Outcomes of the pushed authorization request API."""
    CREATED = "CREATED"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class GMAction(str, Enum):
    """Outcomes of the grant management API."""
    OK = "OK"
    NO_CONTENT = "NO_CONTENT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CALLER_ERROR = "CALLER_ERROR"
    SERVICE_ERROR = "SERVICE_ERROR"


class UserInfoAction(str, Enum):
    """Outcomes of the userinfo introspection API."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    OK = "OK"


class UserInfoIssueAction(str, Enum):
    """Outcomes of the userinfo issue API."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    JSON = "JSON"
    JWT = "JWT"


class ClientRegistrationAction(str, Enum):
    """Outcomes of the dynamic client registration APIs."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    CREATED = "CREATED"
    OK = "OK"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class TokenAction(str, Enum):
    """Outcomes of the token API."""
    INVALID_CLIENT = "INVALID_CLIENT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    PASSWORD = "PASSWORD"
    OK = "OK"
    TOKEN_EXCHANGE = "TOKEN_EXCHANGE"
    JWT_BEARER = "JWT_BEARER"
    ID_TOKEN_REISSUABLE = "ID_TOKEN_REISSUABLE"


class TokenIssueAction(str, Enum):
    """Outcomes of the token issue API."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    OK = "OK"


class TokenFailAction(str, Enum):
    """Outcomes of the token fail API."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"


class AuthorizationIssueAction(str, Enum):
    """Outcomes of the authorization issue and fail APIs."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    LOCATION = "LOCATION"
    FORM = "FORM"


class CredentialOfferInfoAction(str, Enum):
    """Outcomes of the credential offer info API."""
    OK = "OK"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CALLER_ERROR = "CALLER_ERROR"
    SERVICE_ERROR = "SERVICE_ERROR"


class TokenFailReason(str, Enum):
    """Reasons accepted by the token fail API."""
    UNKNOWN = "UNKNOWN"
    INVALID_RESOURCE_OWNER_CREDENTIALS = "INVALID_RESOURCE_OWNER_CREDENTIALS"


class AuthorizationFailReason(str, Enum):
    """Reasons accepted by the authorization fail API."""
    UNKNOWN = "UNKNOWN"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    DENIED = "DENIED"


class GrantType(str, Enum):
    """Grant types the token API reports back."""
    AUTHORIZATION_CODE = "AUTHORIZATION_CODE"
    REFRESH_TOKEN = "REFRESH_TOKEN"
    PASSWORD = "PASSWORD"
    CLIENT_CREDENTIALS = "CLIENT_CREDENTIALS"
    TOKEN_EXCHANGE = "TOKEN_EXCHANGE"
    JWT_BEARER = "JWT_BEARER"
    DEVICE_CODE = "DEVICE_CODE"
    CIBA = "CIBA"
    PRE_AUTHORIZED_CODE = "PRE_AUTHORIZED_CODE"


# ---------------------------------------------------------------------------
# Request envelopes
# ---------------------------------------------------------------------------

class Envelope(BaseModel):
    """Fields shared by every request envelope."""

    model_config = ConfigDict(frozen=True)


class DpopFields(Envelope):
    """Proof-of-possession fields (RFC 9449)."""

    dpop: Optional[str] = None
    htm: Optional[str] = None
    htu: Optional[str] = None


class PushedAuthReqParams(DpopFields):
    """Input of a pushed authorization request."""

    parameters: Parameters = None
    authorization: Optional[str] = None
    client_certificate_path: Optional[List[str]] = None


class TokenParams(DpopFields):
    """Input of a token request."""

    parameters: Parameters = None
    authorization: Optional[str] = None
    client_certificate_path: Optional[List[str]] = None


class UserInfoParams(DpopFields):
    """Input of a userinfo request."""

    access_token: Optional[str] = None
    client_certificate: Optional[str] = None


class GMRequest(DpopFields):
    """Input of a grant management request."""

    access_token: Optional[str] = None
    gm_action: Optional[str] = None
    grant_id: Optional[str] = None
    client_certificate: Optional[str] = None


class ClientRegistrationParams(Envelope):
    """Input of a dynamic client registration request."""

    json_body: Optional[str] = None
    client_id: Optional[str] = None
    authorization: Optional[str] = None


class AuthorizationDecisionParams(Envelope):
    """Input of an authorization decision, taken from the prior authorization call."""

    ticket: str
    claim_names: List[str] = Field(default_factory=list)
    claim_locales: List[str] = Field(default_factory=list)


class CredentialOfferInfoRequest(Envelope):
    """Input of a credential offer URI lookup."""

    identifier: str


# ---------------------------------------------------------------------------
# Decision service responses
# ---------------------------------------------------------------------------

class DecisionResponse(BaseModel):
    """Base for decision service responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    action: Any
    response_content: Optional[str] = None
    result_code: Optional[str] = None
    result_message: Optional[str] = None


class PushedAuthReqResponse(DecisionResponse):
    action: PushedAuthReqAction
    request_uri: Optional[str] = None
    dpop_nonce: Optional[str] = None


class GMResponse(DecisionResponse):
    action: GMAction
    dpop_nonce: Optional[str] = None


class UserInfoResponse(DecisionResponse):
    action: UserInfoAction
    subject: Optional[str] = None
    client_id: Optional[int] = None
    claims: List[str] = Field(default_factory=list)
    token: Optional[str] = None
    dpop_nonce: Optional[str] = None

    @field_validator("claims", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class UserInfoIssueResponse(DecisionResponse):
    action: UserInfoIssueAction
    dpop_nonce: Optional[str] = None


class ClientRegistrationResponse(DecisionResponse):
    action: ClientRegistrationAction


class TokenResponse(DecisionResponse):
    action: TokenAction
    ticket: Optional[str] = None
    # Kept as reported; the decision service may name grants not listed in GrantType.
    grant_type: Optional[str] = None
    client_id: Optional[int] = None
    client_id_alias: Optional[str] = None
    subject: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)
    properties: List[Property] = Field(default_factory=list)
    subject_token: Optional[str] = None
    assertion: Optional[str] = None
    dpop_nonce: Optional[str] = None

    @field_validator("scopes", "properties", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class TokenIssueResponse(DecisionResponse):
    action: TokenIssueAction
    dpop_nonce: Optional[str] = None


class TokenFailResponse(DecisionResponse):
    action: TokenFailAction


class AuthorizationIssueResponse(DecisionResponse):
    action: AuthorizationIssueAction


class AuthorizationFailResponse(DecisionResponse):
    action: AuthorizationIssueAction


class CredentialOfferInfoResponse(DecisionResponse):
    action: CredentialOfferInfoAction
    credential_offer: Optional[str] = None


def action_type(model: Type[DecisionResponse]) -> Type[Enum]:
    """Return the action enum a response model declares."""
    return model.model_fields["action"].annotation
