"""Providers listing endpoint - relays the upstream body as-is."""

import logging

from fastapi import Request, Response

from ...core import UpstreamError
from ..common import gateway_http_error, get_gateway

logger = logging.getLogger("llm-gateway")


async def list_providers(request: Request) -> Response:
    """GET /v1/providers"""
    logger.info("Received providers list request")
    gateway = get_gateway(request)

    try:
        upstream_resp = await gateway.upstream.fetch_providers(
            request.headers.get("authorization")
        )
    except UpstreamError as exc:
        raise gateway_http_error(502, exc, "upstream_error") from exc

    return Response(
        content=upstream_resp.content,
        media_type=upstream_resp.headers.get("content-type", "text/plain"),
    )
