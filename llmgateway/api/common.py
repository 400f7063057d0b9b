"""Helpers shared by the API routes."""

from fastapi import HTTPException, Request

from ..core import Gateway, GatewayError


def get_gateway(request: Request) -> Gateway:
    """Return the gateway attached to the serving application."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("Gateway not initialized. Was the app built with create_app?")
    return gateway


def gateway_http_error(status_code: int, exc: GatewayError, error_type: str) -> HTTPException:
    """Wrap a gateway error in an OpenAI-style error body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "message": exc.message,
                "type": error_type,
                "code": getattr(exc, "code", "gateway_error"),
            }
        },
    )
