"""Main FastAPI application for the LLM gateway."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.routes import chat_completions, list_models, list_providers
from .config_loader import GatewaySettings, load_config, load_settings
from .core import Gateway

logger = logging.getLogger("llm-gateway")


def _load_optional_config() -> dict:
    try:
        return load_config()
    except RuntimeError:
        logger.info("No config file found, using environment variables only")
        return {}


def create_app(settings: Optional[GatewaySettings] = None) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        settings: Gateway settings. Loaded from the config file and the
            environment when omitted.

    Returns:
        The configured FastAPI application instance.
    """
    if settings is None:
        settings = load_settings(_load_optional_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("LLM gateway starting up...")
        logger.info(f"Upstream: {settings.upstream_url}")
        logger.info(f"Provider: {settings.provider or '(none)'}")
        yield
        logger.info("LLM gateway shutting down")

    app = FastAPI(title="LLM Gateway", lifespan=lifespan)
    app.state.gateway = Gateway(settings)

    app.get("/v1/models")(list_models)
    app.get("/v1/providers")(list_providers)
    app.post("/v1/chat/completions")(chat_completions)

    logger.info("FastAPI application created")
    return app


__all__ = ["create_app"]
