"""
Action to HTTP response tables.

Every decision API has a closed set of actions and each action renders
to a fixed status code. The content returned by the decision service goes
either into the body, into a ``WWW-Authenticate`` challenge, or into a
``Location`` header, as the table says; it is never inspected.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from fastapi import Response

from ..errors import UnknownActionError


MEDIA_TYPE_JSON = "application/json;charset=UTF-8"
MEDIA_TYPE_JWT = "application/jwt"
MEDIA_TYPE_HTML = "text/html;charset=UTF-8"
MEDIA_TYPE_TEXT = "text/plain;charset=UTF-8"

UNSUPPORTED_GRANT_TYPE = '{"error":"unsupported_grant_type"}'


class EndpointKind(str, Enum):
    """Decision APIs, identified by their path."""
    PUSHED_AUTH_REQ = "/pushed_auth_req"
    GRANT_MANAGEMENT = "/gm"
    USERINFO = "/auth/userinfo"
    USERINFO_ISSUE = "/auth/userinfo/issue"
    CLIENT_REGISTRATION = "/client/registration"
    TOKEN = "/auth/token"
    TOKEN_ISSUE = "/auth/token/issue"
    TOKEN_FAIL = "/auth/token/fail"
    AUTHORIZATION_ISSUE = "/auth/authorization/issue"
    AUTHORIZATION_FAIL = "/auth/authorization/fail"
    CREDENTIAL_OFFER_INFO = "/vci/offer/info"


class Placement(str, Enum):
    """Where the decision service's content goes in the response."""
    BODY = "body"
    CHALLENGE = "challenge"
    LOCATION = "location"
    NONE = "none"


@dataclass(frozen=True)
class Rendering:
    status_code: int
    media_type: str = MEDIA_TYPE_JSON
    placement: Placement = Placement.BODY


def _body(status_code: int, media_type: str = MEDIA_TYPE_JSON) -> Rendering:
    return Rendering(status_code, media_type, Placement.BODY)


def _challenge(status_code: int) -> Rendering:
    return Rendering(status_code, MEDIA_TYPE_JSON, Placement.CHALLENGE)


_NO_CONTENT = Rendering(204, MEDIA_TYPE_JSON, Placement.NONE)

_AUTHORIZATION_TABLE = {
    "INTERNAL_SERVER_ERROR": _body(500),
    "BAD_REQUEST": _body(400),
    "LOCATION": Rendering(302, MEDIA_TYPE_JSON, Placement.LOCATION),
    "FORM": _body(200, MEDIA_TYPE_HTML),
}

_USERINFO_ERRORS = {
    "INTERNAL_SERVER_ERROR": _challenge(500),
    "BAD_REQUEST": _challenge(400),
    "UNAUTHORIZED": _challenge(401),
    "FORBIDDEN": _challenge(403),
}


STATUS_TABLES: Dict[EndpointKind, Dict[str, Rendering]] = {
    EndpointKind.PUSHED_AUTH_REQ: {
        "BAD_REQUEST": _body(400),
        "CREATED": _body(201),
        "FORBIDDEN": _body(403),
        "INTERNAL_SERVER_ERROR": _body(500),
        "PAYLOAD_TOO_LARGE": _body(413),
        "UNAUTHORIZED": _body(401),
    },
    EndpointKind.GRANT_MANAGEMENT: {
        "OK": _body(200),
        "NO_CONTENT": _NO_CONTENT,
        "UNAUTHORIZED": _body(401),
        "FORBIDDEN": _body(403),
        "NOT_FOUND": _body(404),
        "CALLER_ERROR": _body(500),
        "SERVICE_ERROR": _body(500),
    },
    EndpointKind.USERINFO: dict(_USERINFO_ERRORS),
    EndpointKind.USERINFO_ISSUE: {
        **_USERINFO_ERRORS,
        "JSON": _body(200),
        "JWT": _body(200, MEDIA_TYPE_JWT),
    },
    EndpointKind.CLIENT_REGISTRATION: {
        "INTERNAL_SERVER_ERROR": _body(500),
        "BAD_REQUEST": _body(400),
        "UNAUTHORIZED": _body(401),
        "CREATED": _body(201),
        "OK": _body(200),
        "UPDATED": _body(200),
        "DELETED": _NO_CONTENT,
    },
    EndpointKind.TOKEN: {
        "INVALID_CLIENT": _body(401),
        "INTERNAL_SERVER_ERROR": _body(500),
        "BAD_REQUEST": _body(400),
        "OK": _body(200),
        "ID_TOKEN_REISSUABLE": _body(200),
    },
    EndpointKind.TOKEN_ISSUE: {
        "INTERNAL_SERVER_ERROR": _body(500),
        "OK": _body(200),
    },
    EndpointKind.TOKEN_FAIL: {
        "INTERNAL_SERVER_ERROR": _body(500),
        "BAD_REQUEST": _body(400),
    },
    EndpointKind.AUTHORIZATION_ISSUE: dict(_AUTHORIZATION_TABLE),
    EndpointKind.AUTHORIZATION_FAIL: dict(_AUTHORIZATION_TABLE),
    EndpointKind.CREDENTIAL_OFFER_INFO: {
        "OK": _body(200),
        "FORBIDDEN": _body(403),
        "NOT_FOUND": _body(404),
        "CALLER_ERROR": _body(500),
        "SERVICE_ERROR": _body(500),
    },
}


def _action_name(action: Any) -> Any:
    return action.value if isinstance(action, Enum) else action


def build_response(
    status_code: int,
    content: Optional[str] = None,
    media_type: str = MEDIA_TYPE_JSON,
    headers: Optional[Mapping[str, Optional[str]]] = None,
) -> Response:
    """Build a response that must not be cached, adding only headers with a value."""
    response_headers = {
        "Cache-Control": "no-store",
        "Pragma": "no-cache",
    }

    for name, value in (headers or {}).items():
        if value is not None:
            response_headers[name] = value

    return Response(
        content=content,
        status_code=status_code,
        media_type=media_type if content is not None else None,
        headers=response_headers
    )


def map_action(
    kind: EndpointKind,
    action: Any,
    content: Optional[str] = None,
    headers: Optional[Mapping[str, Optional[str]]] = None,
) -> Response:
    """Render ``action`` of the ``kind`` API into a response.

    Raises ``UnknownActionError`` when the action is not in the table.
    """
    rendering = STATUS_TABLES[kind].get(_action_name(action))
    if rendering is None:
        raise UnknownActionError(kind.value, _action_name(action))

    extra: Dict[str, Optional[str]] = dict(headers or {})
    body = None

    if rendering.placement is Placement.BODY:
        body = content
    elif rendering.placement is Placement.CHALLENGE:
        extra["WWW-Authenticate"] = content
    elif rendering.placement is Placement.LOCATION:
        extra["Location"] = content

    return build_response(rendering.status_code, body, rendering.media_type, extra)


def dpop_nonce_headers(dpop_nonce: Optional[str]) -> Dict[str, str]:
    """``DPoP-Nonce`` header, present only when the decision service sent a nonce."""
    if dpop_nonce is None:
        return {}
    return {"DPoP-Nonce": dpop_nonce}


def unsupported_grant_type(headers: Optional[Mapping[str, Optional[str]]] = None) -> Response:
    """400 Bad Request with ``{"error":"unsupported_grant_type"}``."""
    return build_response(400, UNSUPPORTED_GRANT_TYPE, MEDIA_TYPE_JSON, headers)


def bearer_error(status_code: int, challenge: str) -> Response:
    """An error response carrying only a ``WWW-Authenticate`` challenge."""
    return build_response(status_code, None, headers={"WWW-Authenticate": challenge})


def internal_server_error(message: str) -> Response:
    """500 Internal Server Error with a plain-text explanation."""
    return build_response(500, message, MEDIA_TYPE_TEXT)
