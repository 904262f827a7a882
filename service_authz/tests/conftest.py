"""
Shared fixtures for handler tests.
"""

from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import Request

from service_authz.app.api.client import DecisionServiceClient


@pytest.fixture
def decision_client():
    """Decision service client whose API coroutines are mocks."""
    return AsyncMock(spec=DecisionServiceClient)


@pytest.fixture
def on_error():
    """Recording error hook."""
    return MagicMock()


def make_request(
    headers: Optional[dict] = None,
    tls_chain: Optional[List[str]] = None,
    method: str = "POST",
    path: str = "/",
) -> Request:
    """Build a Starlette request from a raw ASGI scope."""
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "scheme": "https",
        "server": ("as.example.com", 443),
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
    }

    if tls_chain is not None:
        scope["extensions"] = {"tls": {"client_cert_chain": tls_chain}}

    return Request(scope)
