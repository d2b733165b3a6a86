"""Match outgoing requests to configured registry credentials."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from helm_updater.models import AuthType
from helm_updater.models.repo import RegistryCredential

logger = logging.getLogger(__name__)


def credential_host(registry: str) -> str:
    """Reduce a credential's ``registry`` value to a lower-case host[:port].

    ``https://charts.example.com/stable/`` and ``oci://charts.example.com``
    both reduce to ``charts.example.com``.
    """
    value = registry.strip()
    if "://" in value:
        value = value.split("://", 1)[1]
    value = value.split("/", 1)[0]
    return value.lower()


def _host_matches(pattern: str, host: str, port: int | None) -> bool:
    netloc = f"{host}:{port}" if port else host
    if pattern.startswith("*."):
        suffix = pattern[1:]  # keep the leading dot
        target = netloc if ":" in pattern else host
        return target.endswith(suffix)
    if ":" in pattern:
        return pattern == netloc
    return pattern == host


def find_credential(
    url: httpx.URL | str,
    credentials: Sequence[RegistryCredential],
) -> RegistryCredential | None:
    """Return the first credential whose registry matches the URL host."""
    target = httpx.URL(url) if isinstance(url, str) else url
    host = target.host.lower()
    for cred in credentials:
        if _host_matches(credential_host(cred.registry), host, target.port):
            return cred
    return None


def auth_header(credential: RegistryCredential) -> str:
    """Build the Authorization header value for a credential."""
    if credential.auth_type == AuthType.BEARER:
        return f"Bearer {credential.password}"
    # Let httpx do the basic-auth encoding.
    probe = httpx.Request("GET", "http://localhost")
    flow = httpx.BasicAuth(credential.username, credential.password).auth_flow(probe)
    return next(flow).headers["Authorization"]


def decorate_request(
    request: httpx.Request,
    credentials: Sequence[RegistryCredential],
) -> httpx.Request:
    """Return a copy of ``request`` with authentication for its host attached.

    Requests to hosts without a configured credential are returned as-is.
    """
    cred = find_credential(request.url, credentials)
    if cred is None:
        return request
    logger.debug("Using %s credentials for %s", cred.auth_type.value, request.url.host)
    headers = httpx.Headers(request.headers)
    headers["Authorization"] = auth_header(cred)
    return httpx.Request(request.method, request.url, headers=headers, extensions=request.extensions)
