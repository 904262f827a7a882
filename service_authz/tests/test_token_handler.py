"""
Unit tests for TokenRequestHandler.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import Response

from service_authz.app.api.models import (
    GrantType,
    Property,
    TokenFailReason,
    TokenFailResponse,
    TokenIssueResponse,
    TokenParams,
    TokenResponse,
)
from service_authz.app.handlers import TokenRequestHandler
from service_authz.app.spi import TokenRequestHandlerSpi
from service_authz.app.web.basic_credentials import BasicCredentials


class TestTokenRequestHandler:
    """Test cases for TokenRequestHandler."""

    @pytest.fixture
    def spi(self):
        spi = MagicMock(spec=TokenRequestHandlerSpi)
        spi.get_properties.return_value = None
        return spi

    @pytest.fixture
    def handler(self, decision_client, spi, on_error):
        return TokenRequestHandler(decision_client, spi, on_error=on_error)

    @pytest.fixture
    def params(self):
        return TokenParams(
            parameters="grant_type=authorization_code&code=abc",
            authorization=BasicCredentials("client-1", "secret-1").format(),
        )

    @pytest.mark.asyncio
    async def test_ok(self, handler, decision_client, params):
        decision_client.token.return_value = TokenResponse(
            action="OK", response_content='{"access_token":"at"}', dpop_nonce="n-1"
        )

        response = await handler.handle(params)

        assert response.status_code == 200
        assert response.body == b'{"access_token":"at"}'
        assert response.headers["DPoP-Nonce"] == "n-1"
        kwargs = decision_client.token.await_args.kwargs
        assert kwargs["client_id"] == "client-1"
        assert kwargs["client_secret"] == "secret-1"

    @pytest.mark.asyncio
    async def test_invalid_client_challenge(self, handler, decision_client, params):
        decision_client.token.return_value = TokenResponse(
            action="INVALID_CLIENT", response_content='{"error":"invalid_client"}'
        )

        response = await handler.handle(params)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="token"'

    @pytest.mark.asyncio
    async def test_properties_queried_once_and_filtered(self, handler, decision_client, spi, params):
        spi.get_properties.return_value = [
            Property(key="example_parameter", value="example_value"),
            Property(key="access_token", value="forged"),
        ]
        decision_client.token.return_value = TokenResponse(action="OK", response_content="{}")

        await handler.handle(params)

        spi.get_properties.assert_called_once_with()
        sent = decision_client.token.await_args.kwargs["properties"]
        assert [p.key for p in sent] == ["example_parameter"]

    @pytest.mark.asyncio
    async def test_password_grant_issues(self, handler, decision_client, spi, params):
        """The password grant makes its documented second call."""
        spi.authenticate_user.return_value = "user-1"
        spi.get_properties.return_value = [Property(key="a", value="A")]
        decision_client.token.return_value = TokenResponse(
            action="PASSWORD", ticket="t-1", username="alice", password="pw",
            grant_type="PASSWORD", properties=[{"key": "b", "value": "2"}]
        )
        decision_client.token_issue.return_value = TokenIssueResponse(
            action="OK", response_content='{"access_token":"at"}'
        )

        response = await handler.handle(params)

        assert response.status_code == 200
        spi.authenticate_user.assert_called_once_with("alice", "pw")
        args = decision_client.token_issue.await_args
        assert args.args == ("t-1", "user-1")
        assert [(p.key, p.value) for p in args.kwargs["properties"]] == [("b", "2"), ("a", "A")]
        decision_client.token_fail.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_password_grant_rejected(self, handler, decision_client, spi, params):
        spi.authenticate_user.return_value = None
        decision_client.token.return_value = TokenResponse(
            action="PASSWORD", ticket="t-1", username="alice", password="bad"
        )
        decision_client.token_fail.return_value = TokenFailResponse(
            action="BAD_REQUEST", response_content='{"error":"invalid_grant"}'
        )

        response = await handler.handle(params)

        assert response.status_code == 400
        decision_client.token_fail.assert_awaited_once_with(
            "t-1", TokenFailReason.INVALID_RESOURCE_OWNER_CREDENTIALS, options=None
        )
        decision_client.token_issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_exchange_delegated(self, handler, decision_client, spi, params):
        custom = Response(content='{"issued_token_type":"x"}', status_code=200)
        spi.token_exchange.return_value = custom
        token_response = TokenResponse(action="TOKEN_EXCHANGE", grant_type=GrantType.TOKEN_EXCHANGE)
        decision_client.token.return_value = token_response

        response = await handler.handle(params)

        assert response is custom
        spi.token_exchange.assert_called_once_with(token_response)
        decision_client.token.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action,callback", [
        ("TOKEN_EXCHANGE", "token_exchange"),
        ("JWT_BEARER", "jwt_bearer"),
    ])
    async def test_custom_grant_unsupported(self, handler, decision_client, spi, on_error, params, action, callback):
        """A callback yielding nothing is a predicted 400, not a fault."""
        getattr(spi, callback).return_value = None
        decision_client.token.return_value = TokenResponse(action=action)

        response = await handler.handle(params)

        assert response.status_code == 400
        assert response.body == b'{"error":"unsupported_grant_type"}'
        on_error.assert_not_called()
