"""
Unit tests for GMRequestHandler.
"""

import pytest

from service_authz.app.api.models import GMRequest, GMResponse
from service_authz.app.errors import UnknownActionError
from service_authz.app.handlers import GMRequestHandler


class TestGMRequestHandler:
    """Test cases for GMRequestHandler."""

    @pytest.fixture
    def handler(self, decision_client, on_error):
        return GMRequestHandler(decision_client, on_error=on_error)

    @pytest.fixture
    def gm_request(self):
        return GMRequest(access_token="at-1", gm_action="QUERY", grant_id="grant-1")

    @pytest.mark.asyncio
    async def test_unauthorized(self, handler, decision_client, gm_request):
        """UNAUTHORIZED renders 401 with the body and no challenge."""
        decision_client.grant_management.return_value = GMResponse(
            action="UNAUTHORIZED", response_content='{"error":"invalid_token"}'
        )

        response = await handler.handle(gm_request)

        assert response.status_code == 401
        assert response.body == b'{"error":"invalid_token"}'
        assert "WWW-Authenticate" not in response.headers
        decision_client.grant_management.assert_awaited_once_with(gm_request, options=None)

    @pytest.mark.asyncio
    async def test_query(self, handler, decision_client, gm_request):
        decision_client.grant_management.return_value = GMResponse(
            action="OK", response_content='{"scopes":[]}'
        )

        response = await handler.handle(gm_request)

        assert response.status_code == 200
        assert response.body == b'{"scopes":[]}'

    @pytest.mark.asyncio
    async def test_revoke(self, handler, decision_client, gm_request):
        decision_client.grant_management.return_value = GMResponse(action="NO_CONTENT")

        response = await handler.handle(gm_request.model_copy(update={"gm_action": "REVOKE"}))

        assert response.status_code == 204
        assert response.body == b""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["CALLER_ERROR", "SERVICE_ERROR"])
    async def test_errors_map_to_500(self, handler, decision_client, on_error, gm_request, action):
        decision_client.grant_management.return_value = GMResponse(action=action, response_content="{}")

        response = await handler.handle(gm_request)

        assert response.status_code == 500
        on_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_unrecognized_action_is_fatal(self, handler, decision_client, on_error, gm_request):
        """An action that slipped past parsing still never renders a 2xx."""
        decision_client.grant_management.return_value = GMResponse.model_construct(
            action="TELEPORT", response_content="{}", dpop_nonce=None
        )

        response = await handler.handle(gm_request)

        assert response.status_code == 500
        on_error.assert_called_once()
        cause = on_error.call_args.args[0].cause
        assert isinstance(cause, UnknownActionError)
        assert cause.path == "/gm"
        assert cause.action == "TELEPORT"
