"""Streaming passthrough for chat completions.

The upstream body is relayed chunk by chunk and never parsed. Each relay
owns one ``httpx.AsyncClient`` and its streamed response; both are released
exactly once, whether the stream finishes, the upstream drops or the caller
goes away.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable, Mapping, Optional

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .exceptions import StreamRelayError, UpstreamUnreachableError
from .upstream import format_httpx_error
from .upstream_transport import get_upstream_transport

if TYPE_CHECKING:
    from ..config_loader import GatewaySettings

logger = logging.getLogger("llm-gateway")

DEFAULT_STREAM_MEDIA_TYPE = "text/event-stream"

# Only these upstream headers make sense to relay on a streamed body
RELAYED_RESPONSE_HEADERS = {"cache-control", "content-encoding", "x-request-id"}


def build_completion_body(payload: Mapping[str, Any], provider: str) -> dict[str, Any]:
    """Copy the inbound body and pin it to our provider."""
    body = dict(payload)
    body["provider"] = provider
    return body


def build_upstream_headers(authorization: Optional[str] = None) -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if authorization:
        headers["Authorization"] = authorization
    return headers


class StreamingForwarder:
    """Forwards chat completion requests and relays the upstream stream."""

    def __init__(self, settings: GatewaySettings) -> None:
        self.settings = settings

    def _make_client(self, url: str) -> httpx.AsyncClient:
        timeout = self.settings.timeout
        # No read timeout: completions may stay silent for a long time
        stream_timeout = httpx.Timeout(connect=timeout, read=None, write=timeout, pool=timeout)
        return httpx.AsyncClient(
            timeout=stream_timeout,
            transport=get_upstream_transport(url),
            follow_redirects=True,
        )

    async def forward(
        self,
        payload: Mapping[str, Any],
        authorization: Optional[str] = None,
    ) -> StreamingResponse:
        """Send ``payload`` upstream with streaming enabled and relay the body.

        Raises:
            UpstreamUnreachableError: The request could not be sent. Nothing
                has been committed to the caller yet at that point.
        """
        url = self.settings.completions_url
        body = build_completion_body(payload, self.settings.provider)
        headers = build_upstream_headers(authorization)

        client = self._make_client(url)
        try:
            request = client.build_request("POST", url, headers=headers, json=body)
            logger.debug(f"Sending streaming request to {url}")
            resp = await client.send(request, stream=True)
        except httpx.TransportError as exc:
            await client.aclose()
            detail = format_httpx_error(exc, url, self.settings.timeout)
            logger.error(f"Failed to send streaming request: {detail}")
            raise UpstreamUnreachableError(f"Upstream unreachable: {detail}") from exc
        except BaseException:
            await client.aclose()
            raise

        closed = False

        async def close_stream() -> None:
            nonlocal closed
            if closed:
                return
            closed = True
            logger.debug(f"Closing stream for {url}")
            await resp.aclose()
            await client.aclose()

        logger.info(f"Relaying upstream stream from {url} (status {resp.status_code})")
        response_headers = {
            key: value
            for key, value in resp.headers.items()
            if key.lower() in RELAYED_RESPONSE_HEADERS
        }
        return StreamingResponse(
            relay_stream(resp, close_stream, url),
            status_code=resp.status_code,
            headers=response_headers,
            media_type=resp.headers.get("content-type", DEFAULT_STREAM_MEDIA_TYPE),
            background=BackgroundTask(close_stream),
        )


async def relay_stream(
    resp: httpx.Response, close: Callable[[], Awaitable[None]], url: str
) -> AsyncIterator[bytes]:
    """Yield the upstream bytes as they arrive, then release the connection.

    The ``finally`` block also runs when the caller disconnects: Starlette
    cancels the response task and the generator is closed.
    """
    relayed = 0
    completed = False
    try:
        async for chunk in resp.aiter_raw():
            relayed += len(chunk)
            yield chunk
        completed = True
    except httpx.HTTPError as exc:
        detail = format_httpx_error(exc, url)
        logger.warning(f"Upstream stream from {url} ended abnormally after {relayed} bytes: {detail}")
        raise StreamRelayError(f"Stream relay failed: {detail}") from exc
    finally:
        await close()
        if completed:
            logger.debug(f"Stream from {url} finished, relayed {relayed} bytes")
        else:
            logger.info(f"Stream from {url} terminated early after {relayed} bytes")
