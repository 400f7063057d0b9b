"""Per-host HTTPX transports for in-process upstreams.

Tests register an ``httpx.ASGITransport`` for the upstream's host; every
client the gateway opens toward that host then talks to the ASGI app
instead of the network.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger("llm-gateway")

_TRANSPORTS: dict[str, httpx.AsyncBaseTransport] = {}


def _host_of(url: str) -> str:
    return urlparse(url).netloc.strip().lower()


def register_upstream_transport(host: str, transport: httpx.AsyncBaseTransport) -> None:
    """Route requests for ``host`` (e.g. 'upstream.local:8000') through ``transport``."""
    if not host:
        raise ValueError("host is required")
    key = host.strip().lower()
    _TRANSPORTS[key] = transport
    logger.debug("Registered upstream transport for host '%s'", key)


def clear_upstream_transports() -> None:
    _TRANSPORTS.clear()


def get_upstream_transport(url: str) -> Optional[httpx.AsyncBaseTransport]:
    """Return the registered transport for the URL's host, if any."""
    if not url:
        return None
    return _TRANSPORTS.get(_host_of(url))
