"""
Shared metrics configuration for the authorization request-handling layer.
"""

from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager

from prometheus_client import REGISTRY, Counter, Histogram, CollectorRegistry

from .config import get_config


class MetricsCollector:
    """Centralized metrics collector for request handlers.

    A disabled collector registers nothing and ignores every record call.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None, enabled: bool = True):
        self.service_name = service_name
        self.registry = registry if registry is not None else REGISTRY
        self.enabled = enabled
        self._metrics: Dict[str, Any] = {}
        if enabled:
            self._setup_metrics()

    def _setup_metrics(self):
        """Set up handler and decision-service metrics."""

        self._metrics["handler_responses_total"] = Counter(
            "authz_handler_responses_total",
            "Total responses produced by request handlers",
            ["endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["decision_calls_total"] = Counter(
            "authz_decision_calls_total",
            "Total calls to the decision service",
            ["api", "outcome"],
            registry=self.registry
        )

        self._metrics["decision_call_duration_seconds"] = Histogram(
            "authz_decision_call_duration_seconds",
            "Decision service call duration in seconds",
            ["api"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "authz_errors_total",
            "Total fatal handler errors",
            ["error_code", "service"],
            registry=self.registry
        )

    def record_response(self, endpoint: str, status_code: int):
        """Record a rendered handler response."""
        if not self.enabled:
            return
        self._metrics["handler_responses_total"].labels(
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

    def record_decision_call(self, api: str, outcome: str, duration: float):
        """Record a decision service call."""
        if not self.enabled:
            return
        self._metrics["decision_calls_total"].labels(api=api, outcome=outcome).inc()
        self._metrics["decision_call_duration_seconds"].labels(api=api).observe(duration)

    def record_error(self, error_code: str, service: Optional[str] = None):
        """Record a fatal handler error by its error code."""
        if not self.enabled:
            return
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_code=error_code, service=service_name).inc()

    @contextmanager
    def time_decision_call(self, api: str):
        """Context manager timing a decision service call."""
        start_time = time.time()
        outcome = "error"
        try:
            yield
            outcome = "ok"
        finally:
            self.record_decision_call(api, outcome, time.time() - start_time)


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str = "authz", registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service.

    Collectors bound to the default registry are shared per service name,
    since prometheus_client refuses duplicate registrations. Whether they
    record anything follows ``enable_metrics``.
    """
    enabled = get_config().enable_metrics
    if registry is not None:
        return MetricsCollector(service_name, registry, enabled=enabled)

    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name, enabled=enabled)
            _collectors[service_name] = collector
        return collector
