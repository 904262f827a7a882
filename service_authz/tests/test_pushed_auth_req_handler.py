"""
Unit tests for PushedAuthReqHandler.
"""

import pytest

from service_authz.app.api.models import PushedAuthReqParams, PushedAuthReqResponse
from service_authz.app.errors import DecisionServiceError, HandlerError, UnknownActionError
from service_authz.app.handlers import PushedAuthReqHandler
from service_authz.app.web.basic_credentials import BasicCredentials


class TestPushedAuthReqHandler:
    """Test cases for PushedAuthReqHandler."""

    @pytest.fixture
    def handler(self, decision_client, on_error):
        return PushedAuthReqHandler(decision_client, on_error=on_error)

    @pytest.fixture
    def params(self):
        return PushedAuthReqParams(
            parameters={"response_type": ["code"], "scope": ["openid"]},
            authorization=BasicCredentials("client-1", "secret-1").format(),
            client_certificate_path=["leaf", "intermediate", "root"],
            dpop="dpop.proof.jwt",
            htm="POST",
            htu="https://as.example.com/par",
        )

    @pytest.mark.asyncio
    async def test_created(self, handler, decision_client, on_error, params):
        """CREATED renders 201 with the body as is and no nonce header."""
        content = '{"request_uri":"urn:x","expires_in":60}'
        decision_client.pushed_auth_req.return_value = PushedAuthReqResponse(
            action="CREATED", response_content=content
        )

        response = await handler.handle(params)

        assert response.status_code == 201
        assert response.body == content.encode("utf-8")
        assert "DPoP-Nonce" not in response.headers
        on_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_call_arguments(self, handler, decision_client, params):
        decision_client.pushed_auth_req.return_value = PushedAuthReqResponse(action="CREATED")
        options = {"X-Request-Id": "r-1"}

        await handler.handle(params, options)

        decision_client.pushed_auth_req.assert_awaited_once_with(
            {"response_type": ["code"], "scope": ["openid"]},
            client_id="client-1",
            client_secret="secret-1",
            client_certificate="leaf",
            client_certificate_path=["intermediate", "root"],
            dpop="dpop.proof.jwt",
            htm="POST",
            htu="https://as.example.com/par",
            options=options
        )

    @pytest.mark.asyncio
    async def test_malformed_authorization_is_absent(self, handler, decision_client):
        decision_client.pushed_auth_req.return_value = PushedAuthReqResponse(action="BAD_REQUEST")

        response = await handler.handle(PushedAuthReqParams(parameters="a=b", authorization="Basic %%%"))

        assert response.status_code == 400
        kwargs = decision_client.pushed_auth_req.await_args.kwargs
        assert kwargs["client_id"] is None
        assert kwargs["client_secret"] is None
        assert kwargs["client_certificate"] is None

    @pytest.mark.asyncio
    async def test_dpop_nonce_propagated(self, handler, decision_client, params):
        decision_client.pushed_auth_req.return_value = PushedAuthReqResponse(
            action="UNAUTHORIZED", response_content='{"error":"use_dpop_nonce"}', dpop_nonce="nonce-1"
        )

        response = await handler.handle(params)

        assert response.status_code == 401
        assert response.headers["DPoP-Nonce"] == "nonce-1"

    @pytest.mark.asyncio
    async def test_payload_too_large(self, handler, decision_client, params):
        decision_client.pushed_auth_req.return_value = PushedAuthReqResponse(action="PAYLOAD_TOO_LARGE")

        response = await handler.handle(params)

        assert response.status_code == 413

    @pytest.mark.asyncio
    async def test_remote_failure(self, handler, decision_client, on_error, params):
        """A failed decision call becomes a 500 and is reported once."""
        decision_client.pushed_auth_req.side_effect = DecisionServiceError("connection refused")

        response = await handler.handle(params)

        assert response.status_code == 500
        decision_client.pushed_auth_req.assert_awaited_once()
        on_error.assert_called_once()
        error = on_error.call_args.args[0]
        assert isinstance(error, HandlerError)
        assert isinstance(error.cause, DecisionServiceError)
        assert error.response is response

    @pytest.mark.asyncio
    async def test_unknown_action(self, handler, decision_client, on_error, params):
        decision_client.pushed_auth_req.side_effect = UnknownActionError("/pushed_auth_req", "TELEPORT")

        response = await handler.handle(params)

        assert response.status_code == 500
        assert b"TELEPORT" in response.body
        on_error.assert_called_once()
        assert isinstance(on_error.call_args.args[0].cause, UnknownActionError)

    @pytest.mark.asyncio
    async def test_error_hook_cannot_change_response(self, decision_client, params):
        """A failing hook leaves the prepared response in place."""
        def hook(error):
            raise RuntimeError("alerting is down")

        handler = PushedAuthReqHandler(decision_client, on_error=hook)
        decision_client.pushed_auth_req.side_effect = RuntimeError("boom")

        response = await handler.handle(params)

        assert response.status_code == 500
        assert b"Unexpected error in PushedAuthReqHandler: boom" == response.body
