"""
Service provider interfaces.

A deployment implements these to answer the questions the decision
service cannot: who the end-user is, whether they consented, what their
claims are, and how to handle grant types that need local rules. Each
interface is a pure contract; there are no default implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from fastapi import Response

from ..api.models import Property, TokenResponse


class AuthorizationDecisionHandlerSpi(ABC):
    """Answers for the end of an authorization flow, after the consent page."""

    @abstractmethod
    def is_client_authorized(self) -> bool:
        """Whether the end-user authorized the client.

        Queried first. When it returns ``False`` nothing else is asked.
        """

    @abstractmethod
    def get_user_authenticated_at(self) -> int:
        """Seconds since the epoch when the end-user authenticated, or 0 if unknown."""

    @abstractmethod
    def get_user_subject(self) -> Optional[str]:
        """The end-user's unique identifier. Must not be ``None`` once authorized."""

    @abstractmethod
    def get_acr(self) -> Optional[str]:
        """The authentication context class reference satisfied, if any."""

    @abstractmethod
    def get_user_claim(self, claim_name: str, language_tag: Optional[str]) -> Any:
        """Value of a claim, optionally localized; ``None`` when unavailable."""

    @abstractmethod
    def get_properties(self) -> Optional[Sequence[Property]]:
        """Extra properties to associate with the issued authorization code or token."""

    @abstractmethod
    def get_scopes(self) -> Optional[List[str]]:
        """Scopes replacing the requested ones, or ``None`` to keep them."""


class TokenRequestHandlerSpi(ABC):
    """Answers for the token endpoint."""

    @abstractmethod
    def authenticate_user(self, username: Optional[str], password: Optional[str]) -> Optional[str]:
        """Authenticate a resource owner (password grant); return the subject or ``None``."""

    @abstractmethod
    def get_properties(self) -> Optional[Sequence[Property]]:
        """Extra properties to associate with the access token."""

    @abstractmethod
    def token_exchange(self, token_response: TokenResponse) -> Optional[Response]:
        """Handle an RFC 8693 token exchange; ``None`` means unsupported."""

    @abstractmethod
    def jwt_bearer(self, token_response: TokenResponse) -> Optional[Response]:
        """Handle an RFC 7523 JWT bearer grant; ``None`` means unsupported."""


class UserInfoRequestHandlerSpi(ABC):
    """Answers for the userinfo endpoint."""

    @abstractmethod
    def get_user_claim(self, subject: str, claim_name: str, language_tag: Optional[str]) -> Any:
        """Value of a claim of the given end-user; ``None`` when unavailable."""
