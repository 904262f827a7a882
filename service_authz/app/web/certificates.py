"""
Client certificate extraction for mutual TLS client authentication (RFC 8705).

Two strategies exist. When the ASGI server terminates TLS itself, the
chain is read from the connection's TLS extension. When a reverse proxy
terminates TLS, it forwards the certificates in request headers. The
transport is always consulted first.
"""

import re
import textwrap
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Optional, Sequence
from urllib.parse import unquote

from starlette.requests import HTTPConnection

from shared.config import get_config


_PEM_PATTERN = re.compile(
    r"^\s*(-----BEGIN [A-Z ]+-----)(.*?)(-----END [A-Z ]+-----)\s*$",
    re.DOTALL
)

# Value some proxies emit when no certificate was presented.
_NULL_VALUES = {"", "(null)", "null"}


def normalize_pem(value: str) -> Optional[str]:
    """Turn a forwarded certificate into canonical PEM, or ``None`` if it isn't one."""
    value = value.strip()
    if value in _NULL_VALUES:
        return None

    if value.startswith("-----BEGIN%20") or "%0A" in value:
        value = unquote(value)

    match = _PEM_PATTERN.match(value)
    if match is None:
        return None

    begin, body, end = match.groups()
    body = re.sub(r"\s+", "", body)
    if not body:
        return None

    lines = [begin] + textwrap.wrap(body, 64) + [end]
    return "\n".join(lines) + "\n"


class ClientCertificateExtractor(ABC):
    """Strategy returning a client certificate chain, leaf first."""

    @abstractmethod
    def extract_client_certificate_chain(self, request: HTTPConnection) -> List[str]:
        """Return the chain as PEM strings; an empty list when there is none."""


class HttpsRequestClientCertificateExtractor(ClientCertificateExtractor):
    """Read the chain the ASGI server attached to a mutually authenticated connection."""

    def extract_client_certificate_chain(self, request: HTTPConnection) -> List[str]:
        extensions = request.scope.get("extensions") or {}
        tls = extensions.get("tls") or {}
        chain = tls.get("client_cert_chain") or []

        return [cert for cert in chain if cert]


class HeaderClientCertificateExtractor(ClientCertificateExtractor):
    """Read certificates forwarded by a TLS-terminating proxy."""

    def __init__(self, header_names: Sequence[str]):
        self.header_names = list(header_names)

    def extract_client_certificate_chain(self, request: HTTPConnection) -> List[str]:
        chain = []

        for name in self.header_names:
            value = request.headers.get(name)
            if value is None:
                continue

            cert = normalize_pem(value)
            if cert is not None:
                chain.append(cert)

        return chain


@lru_cache(maxsize=None)
def get_https_request_extractor() -> HttpsRequestClientCertificateExtractor:
    return HttpsRequestClientCertificateExtractor()


@lru_cache(maxsize=None)
def get_header_extractor() -> HeaderClientCertificateExtractor:
    return HeaderClientCertificateExtractor(get_config().client_certificate_headers)


def extract_client_certificate_chain(request: HTTPConnection) -> List[str]:
    """Extract the client certificate chain, preferring the TLS connection over headers."""
    chain = get_https_request_extractor().extract_client_certificate_chain(request)
    if chain:
        return chain

    return get_header_extractor().extract_client_certificate_chain(request)


def extract_client_certificate(request: HTTPConnection) -> Optional[str]:
    """Extract the client certificate itself (the first entry of the chain)."""
    chain = extract_client_certificate_chain(request)
    if chain:
        return chain[0]

    return None
