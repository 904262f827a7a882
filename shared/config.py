"""
Shared configuration management for the authorization request-handling layer.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CERTIFICATE_HEADERS = [
    "X-Ssl-Cert",
    "X-Ssl-Cert-Chain-1",
    "X-Ssl-Cert-Chain-2",
    "X-Ssl-Cert-Chain-3",
    "X-Ssl-Cert-Chain-4",
]


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AUTHZ_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Decision service
    decision_service_url: str = Field(default="http://localhost:8080")
    decision_service_id: Optional[str] = Field(default=None)
    decision_api_key: Optional[str] = Field(default=None)
    decision_api_secret: Optional[str] = Field(default=None)
    decision_timeout_seconds: float = Field(default=10.0)

    # mTLS behind a TLS-terminating proxy
    client_certificate_headers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CERTIFICATE_HEADERS)
    )

    # Observability
    enable_metrics: bool = Field(default=True)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "authz"


@lru_cache()
def get_config(service_name: str = "authz") -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name)
