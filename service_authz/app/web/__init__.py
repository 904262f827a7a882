"""
HTTP-facing helpers shared by all handlers.

- basic_credentials: Basic Authorization header parsing (never raises)
- certificates: client certificate chain extraction, transport first
- responses: per-API action tables and response builders
"""

from .basic_credentials import BasicCredentials
from .responses import EndpointKind, map_action

__all__ = [
    "BasicCredentials",
    "EndpointKind",
    "map_action",
]
