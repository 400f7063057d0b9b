"""HTTP client for the non-streaming upstream endpoints."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx

from .exceptions import UpstreamResponseError, UpstreamUnreachableError
from .normalizer import safe_stringify
from .upstream_transport import get_upstream_transport

if TYPE_CHECKING:
    from ..config_loader import GatewaySettings

logger = logging.getLogger("llm-gateway")

ERROR_BODY_SAMPLE_LIMIT = 500


def auth_headers(authorization: Optional[str]) -> dict[str, str]:
    """Pass the caller's Authorization header through verbatim, if any."""
    return {"Authorization": authorization} if authorization else {}


def format_httpx_error(exc: Exception, url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = getattr(exc, "request", None)
    except RuntimeError:
        # httpx raises when .request was never set
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    if isinstance(exc, httpx.TimeoutException) and timeout is not None:
        parts.append(f"timeout={timeout}s")

    return "; ".join(parts)


def decode_body(resp: httpx.Response) -> Any:
    """Decode a response as JSON, falling back to its text."""
    try:
        return resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return resp.text


class UpstreamClient:
    """Issues the plain GET calls toward the configured upstream."""

    def __init__(self, settings: GatewaySettings) -> None:
        self.settings = settings

    async def _get(self, url: str, authorization: Optional[str]) -> httpx.Response:
        transport = get_upstream_transport(url)
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.timeout, transport=transport, follow_redirects=True
            ) as client:
                resp = await client.get(url, headers=auth_headers(authorization))
        except httpx.TransportError as exc:
            detail = format_httpx_error(exc, url, self.settings.timeout)
            logger.error(f"Upstream unreachable: {detail}")
            raise UpstreamUnreachableError(f"Upstream unreachable: {detail}") from exc

        if resp.status_code >= 400:
            sample = safe_stringify(resp.text, ERROR_BODY_SAMPLE_LIMIT)
            msg = f"Upstream {url} returned status {resp.status_code}: {sample}"
            logger.error(msg)
            raise UpstreamResponseError(msg, status_code=resp.status_code)
        return resp

    async def fetch_models(self, authorization: Optional[str] = None) -> Any:
        """Fetch the raw models payload (decoded JSON, or text if not JSON)."""
        url = self.settings.models_url
        resp = await self._get(url, authorization)
        payload = decode_body(resp)
        logger.debug(
            f"Fetched models from upstream {url} - status: {resp.status_code}, "
            f"dataType: {type(payload).__name__}"
        )
        return payload

    async def fetch_providers(self, authorization: Optional[str] = None) -> httpx.Response:
        """Fetch the upstream provider list; the body is relayed untouched."""
        url = self.settings.providers_url
        resp = await self._get(url, authorization)
        logger.debug(f"Fetched providers from upstream {url} - {len(resp.content)} bytes")
        return resp
