"""
Basic authentication credentials (RFC 7617) carried in an Authorization header.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus, unquote_plus


_BASIC_PATTERN = re.compile(r"^Basic +([^ ]+) *$", re.IGNORECASE)


@dataclass(frozen=True)
class BasicCredentials:
    """A pair of user ID and password, e.g. client ID and client secret."""
    user_id: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def parse(cls, authorization: Optional[str]) -> Optional["BasicCredentials"]:
        """Parse the value of an Authorization header.

        Returns ``None`` when the value is missing, uses another scheme, is
        not valid base64, or lacks the ``:`` separator. Never raises.
        Both halves are form-urldecoded (RFC 6749, 2.3.1); empty ones are ``None``.
        """
        if not authorization:
            return None

        match = _BASIC_PATTERN.match(authorization)
        if match is None:
            return None

        try:
            decoded = base64.b64decode(match.group(1), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None

        user_id, separator, password = decoded.partition(":")
        if not separator:
            return None

        return cls(user_id=unquote_plus(user_id) or None, password=unquote_plus(password) or None)

    def format(self) -> str:
        """Build the value of an Authorization header for these credentials."""
        raw = f"{quote_plus(self.user_id or '')}:{quote_plus(self.password or '')}"
        return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def parse_client_credentials(authorization: Optional[str]):
    """Return ``(client_id, client_secret)``; either may be ``None``."""
    credentials = BasicCredentials.parse(authorization)
    if credentials is None:
        return None, None

    return credentials.user_id, credentials.password


_BEARER_PATTERN = re.compile(r"^(?:Bearer|DPoP) +([^ ]+) *$", re.IGNORECASE)


def extract_access_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from a ``Bearer`` or ``DPoP`` Authorization header."""
    if not authorization:
        return None

    match = _BEARER_PATTERN.match(authorization)
    if match is None:
        return None

    return match.group(1)
