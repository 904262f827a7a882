"""
Shared utilities for the authorization request-handling layer.

This package aggregates common building blocks consumed by the handlers:

- config: Settings via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Any cross-package logic should live here to avoid import cycles. Do not
import from service_authz into shared/.
"""
