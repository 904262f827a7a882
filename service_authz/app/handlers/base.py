"""
Common machinery for request handlers.
"""

from typing import Awaitable, Callable, Optional

from fastapi import Response

from shared.errors import AuthzError, ErrorReport, current_trace_id
from shared.logging import get_logger
from shared.metrics import get_metrics_collector

from ..api.client import DecisionServiceClient
from ..errors import HandlerError
from ..web.responses import internal_server_error


ErrorTranslator = Callable[[HandlerError], None]

logger = get_logger("authz.handlers")


def error_report(error: HandlerError) -> ErrorReport:
    """Diagnostics of ``error``, taken from its cause when the cause is one of ours."""
    cause = error.cause
    if isinstance(cause, AuthzError):
        return cause.report()

    return ErrorReport(
        code="HANDLER_ERROR",
        message=error.message,
        trace_id=current_trace_id(),
        details={"cause": type(cause).__name__} if cause is not None else {}
    )


def log_error(error: HandlerError) -> None:
    """Default error hook: record diagnostics, nothing else."""
    report = error_report(error)
    logger.error(
        "Request handler failed",
        error=report.message,
        error_code=report.code,
        details=report.details,
        status_code=error.response.status_code,
        exc_info=error.cause
    )
    get_metrics_collector().record_error(report.code)


class BaseHandler:
    """Base class of all request handlers.

    Subclasses implement their flow in a coroutine and pass it to
    ``dispatch``, which guarantees a response: fatal conditions become a
    ``HandlerError`` that is reported to the error hook exactly once and
    whose response is returned as is.
    """

    endpoint_name = "base"

    def __init__(self, client: DecisionServiceClient, on_error: Optional[ErrorTranslator] = None):
        self.client = client
        self.on_error = on_error or log_error
        self.logger = get_logger(f"authz.{self.endpoint_name}")
        self.metrics = get_metrics_collector()

    async def dispatch(self, flow: Awaitable[Response]) -> Response:
        try:
            response = await flow
        except HandlerError as e:
            error = e
        except AuthzError as e:
            error = HandlerError(e.message, internal_server_error(e.message), e)
        except Exception as e:
            error = self.unexpected(f"Unexpected error in {type(self).__name__}", e)
        else:
            self.metrics.record_response(self.endpoint_name, response.status_code)
            return response

        self.translate(error)
        self.metrics.record_response(self.endpoint_name, error.response.status_code)

        return error.response

    def translate(self, error: HandlerError) -> None:
        """Hand ``error`` to the error hook; the hook cannot change the response."""
        try:
            self.on_error(error)
        except Exception as e:
            self.logger.error("Error hook raised", error=str(e), exc_info=True)

    def unexpected(self, message: str, cause: Optional[BaseException] = None) -> HandlerError:
        if cause is not None and str(cause):
            message += ": " + str(cause)

        return HandlerError(message, internal_server_error(message), cause)
