"""
Capability interfaces implemented once per deployment.
"""

from .base import (
    AuthorizationDecisionHandlerSpi,
    TokenRequestHandlerSpi,
    UserInfoRequestHandlerSpi,
)

__all__ = [
    "AuthorizationDecisionHandlerSpi",
    "TokenRequestHandlerSpi",
    "UserInfoRequestHandlerSpi",
]
