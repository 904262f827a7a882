"""
Decision service boundary.

Contains the HTTP client for the remote decision service together with
the request envelopes and response models it exchanges:

- client: one coroutine per decision API, single POST, no retries
- models: frozen envelopes, action enums and response DTOs

Keep this package free of response rendering; handlers own that.
"""

from .client import DecisionServiceClient
from . import models

__all__ = [
    "DecisionServiceClient",
    "models",
]
