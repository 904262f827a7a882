"""
Request handlers, one per endpoint kind.

Each handler turns an envelope into decision service calls and renders
the returned action. ``handle`` always returns a response; fatal errors
are reported to the handler's ``on_error`` hook and rendered as 500.
"""

from .authorization_decision import AuthorizationDecisionHandler
from .base import BaseHandler, ErrorTranslator, log_error
from .client_registration import ClientRegistrationRequestHandler
from .credential_offer import CredentialOfferUriRequestHandler
from .grant_management import GMRequestHandler
from .pushed_auth_req import PushedAuthReqHandler
from .token import TokenRequestHandler
from .userinfo import UserInfoRequestHandler

__all__ = [
    "AuthorizationDecisionHandler",
    "BaseHandler",
    "ClientRegistrationRequestHandler",
    "CredentialOfferUriRequestHandler",
    "ErrorTranslator",
    "GMRequestHandler",
    "PushedAuthReqHandler",
    "TokenRequestHandler",
    "UserInfoRequestHandler",
    "log_error",
]
