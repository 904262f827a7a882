"""
Exception hierarchy and error reports for the authorization request-handling layer.

Every fatal condition raised inside a handler derives from ``AuthzError``.
Its ``report()`` is what the default error hook logs.
"""

from typing import Any, Dict, Optional

from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, Field


class ErrorReport(BaseModel):
    """Diagnostics recorded for a fatal error."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    trace_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


def current_trace_id() -> Optional[str]:
    """Hex trace id of the active span, if one is being recorded."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            return f"{span_context.trace_id:032x}"

    return None


class AuthzError(Exception):
    """Base exception of the request-handling layer."""

    code = "AUTHZ_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def report(self) -> ErrorReport:
        return ErrorReport(
            code=self.code,
            message=self.message,
            trace_id=current_trace_id(),
            details=self.details
        )


class ServiceError(AuthzError):
    """A contract inside this process was broken."""

    code = "SERVICE_ERROR"


class ExternalServiceError(AuthzError):
    """A remote collaborator failed; ``message`` is prefixed with its name."""

    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(f"{service}: {message}", details)
