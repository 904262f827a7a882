"""
Authorization request-handling layer.

Sits between an OAuth/OIDC server's HTTP endpoints and the remote
decision service that owns clients, consents and tokens.
"""

__version__ = "1.0.0"
