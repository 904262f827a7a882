"""
Tests for the action to response tables.
"""

import pytest

from service_authz.app.errors import UnknownActionError
from service_authz.app.api.models import GMAction, PushedAuthReqAction
from service_authz.app.web.responses import (
    MEDIA_TYPE_HTML,
    MEDIA_TYPE_JWT,
    STATUS_TABLES,
    EndpointKind,
    map_action,
    unsupported_grant_type,
)


ALL_RENDERINGS = [
    (kind, action, rendering.status_code)
    for kind, table in STATUS_TABLES.items()
    for action, rendering in table.items()
]


class TestMapAction:
    """Test cases for map_action."""

    @pytest.mark.parametrize("kind,action,status_code", ALL_RENDERINGS)
    def test_every_table_entry(self, kind, action, status_code):
        response = map_action(kind, action, '{"k":"v"}')

        assert response.status_code == status_code
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["Pragma"] == "no-cache"

    @pytest.mark.parametrize("action,status_code", [
        (GMAction.OK, 200),
        (GMAction.NO_CONTENT, 204),
        (GMAction.UNAUTHORIZED, 401),
        (GMAction.FORBIDDEN, 403),
        (GMAction.NOT_FOUND, 404),
        (GMAction.CALLER_ERROR, 500),
        (GMAction.SERVICE_ERROR, 500),
    ])
    def test_grant_management_table(self, action, status_code):
        assert map_action(EndpointKind.GRANT_MANAGEMENT, action).status_code == status_code

    @pytest.mark.parametrize("action,status_code", [
        (PushedAuthReqAction.BAD_REQUEST, 400),
        (PushedAuthReqAction.CREATED, 201),
        (PushedAuthReqAction.FORBIDDEN, 403),
        (PushedAuthReqAction.INTERNAL_SERVER_ERROR, 500),
        (PushedAuthReqAction.PAYLOAD_TOO_LARGE, 413),
        (PushedAuthReqAction.UNAUTHORIZED, 401),
    ])
    def test_pushed_auth_req_table(self, action, status_code):
        assert map_action(EndpointKind.PUSHED_AUTH_REQ, action).status_code == status_code

    def test_body_is_verbatim_json(self):
        content = '{"request_uri":"urn:x","expires_in":60}'

        response = map_action(EndpointKind.PUSHED_AUTH_REQ, PushedAuthReqAction.CREATED, content)

        assert response.body == content.encode("utf-8")
        assert response.headers["Content-Type"] == "application/json;charset=UTF-8"

    def test_extra_headers_only_when_supplied(self):
        response = map_action(
            EndpointKind.PUSHED_AUTH_REQ, PushedAuthReqAction.CREATED, "{}",
            {"DPoP-Nonce": None}
        )
        assert "DPoP-Nonce" not in response.headers

        response = map_action(
            EndpointKind.PUSHED_AUTH_REQ, PushedAuthReqAction.CREATED, "{}",
            {"DPoP-Nonce": "n-1"}
        )
        assert response.headers["DPoP-Nonce"] == "n-1"

    def test_no_content_has_no_body(self):
        response = map_action(EndpointKind.GRANT_MANAGEMENT, GMAction.NO_CONTENT, '{"ignored":true}')

        assert response.status_code == 204
        assert response.body == b""

    def test_challenge_placement(self):
        challenge = 'Bearer error="invalid_token"'

        response = map_action(EndpointKind.USERINFO, "UNAUTHORIZED", challenge)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == challenge
        assert response.body == b""

    def test_location_placement(self):
        response = map_action(EndpointKind.AUTHORIZATION_ISSUE, "LOCATION", "https://client.example/cb?code=x")

        assert response.status_code == 302
        assert response.headers["Location"] == "https://client.example/cb?code=x"

    def test_declared_media_types(self):
        assert map_action(EndpointKind.USERINFO_ISSUE, "JWT", "a.b.c").headers["Content-Type"] == MEDIA_TYPE_JWT
        assert map_action(EndpointKind.AUTHORIZATION_FAIL, "FORM", "<html/>").headers["Content-Type"] == MEDIA_TYPE_HTML

    def test_unknown_action(self):
        with pytest.raises(UnknownActionError) as exc_info:
            map_action(EndpointKind.GRANT_MANAGEMENT, "TELEPORT", "{}")

        assert exc_info.value.action == "TELEPORT"
        assert exc_info.value.path == "/gm"
        assert "TELEPORT" in exc_info.value.message

    def test_action_valid_elsewhere_is_unknown_here(self):
        with pytest.raises(UnknownActionError):
            map_action(EndpointKind.PUSHED_AUTH_REQ, GMAction.NO_CONTENT)


def test_unsupported_grant_type():
    response = unsupported_grant_type()

    assert response.status_code == 400
    assert response.body == b'{"error":"unsupported_grant_type"}'
