"""Chat completions endpoint - streamed passthrough to the upstream."""

import json
import logging
from typing import Mapping

from fastapi import HTTPException, Request, Response

from ...core import UpstreamError
from ..common import gateway_http_error, get_gateway

logger = logging.getLogger("llm-gateway")


async def chat_completions(request: Request) -> Response:
    """Forward a chat completion request and stream back the upstream body.

    POST /v1/chat/completions

    The body is forwarded with ``provider`` set to the configured provider.
    Once streaming has started, failures end the response without an error
    body.
    """
    logger.info("Received chat completions request")
    gateway = get_gateway(request)

    body = await request.body()
    try:
        payload = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error(f"Invalid JSON payload: {exc}")
        raise HTTPException(
            status_code=400,
            detail={
                "error": {
                    "message": "Invalid JSON payload",
                    "type": "invalid_request_error",
                    "code": "invalid_json",
                }
            },
        ) from exc

    if not isinstance(payload, Mapping):
        logger.error("Payload must be a JSON object")
        raise HTTPException(
            status_code=400,
            detail={
                "error": {
                    "message": "Request body must be a JSON object",
                    "type": "invalid_request_error",
                    "code": "invalid_json_shape",
                }
            },
        )

    try:
        return await gateway.forwarder.forward(
            payload, authorization=request.headers.get("authorization")
        )
    except UpstreamError as exc:
        raise gateway_http_error(502, exc, "upstream_error") from exc
