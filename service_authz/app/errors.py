"""
Error types raised inside the request-handling layer.

Predicted protocol outcomes are never exceptions; they travel as action
values. Everything here is fatal and ends in a ``HandlerError`` whose
ready-made response is what the endpoint returns.
"""

from typing import Any, Dict, Optional

from fastapi import Response

from shared.errors import ExternalServiceError, ServiceError


class DecisionServiceError(ExternalServiceError):
    """The decision service could not be reached or answered badly."""

    def __init__(self, message: str = "Decision service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("decision-service", message, details)


class UnknownActionError(ServiceError):
    """An action outside the endpoint's closed set was returned."""

    code = "UNKNOWN_ACTION"

    def __init__(self, path: str, action: Any):
        self.path = path
        self.action = action
        super().__init__(
            f"The decision service returned an unknown action '{action}' from {path}",
            details={"path": path, "action": str(action)}
        )


class PolicyViolationError(ServiceError):
    """A deployment callback broke the contract it is bound to."""

    code = "POLICY_VIOLATION"


class HandlerError(Exception):
    """A fatal condition converted into a response ready to be returned."""

    def __init__(self, message: str, response: Response, cause: Optional[BaseException] = None):
        self.message = message
        self.response = response
        self.cause = cause
        super().__init__(message)
