"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

from ...core import ModelsNotFoundError, UpstreamError, build_model_list
from ..common import gateway_http_error, get_gateway

logger = logging.getLogger("llm-gateway")


async def list_models(request: Request) -> dict:
    """List the configured provider's models in a stable format.

    GET /v1/models

    Returns:
        ``{"object": "list", "data": [...]}``; 404 when the upstream has no
        models, or none for our provider; 502 when the upstream fails.
    """
    logger.info("Received models list request")
    gateway = get_gateway(request)

    try:
        raw = await gateway.upstream.fetch_models(request.headers.get("authorization"))
    except UpstreamError as exc:
        raise gateway_http_error(502, exc, "upstream_error") from exc

    try:
        return build_model_list(raw, gateway.settings)
    except ModelsNotFoundError as exc:
        raise gateway_http_error(404, exc, "not_found_error") from exc
