"""llm-gateway - a provider-agnostic gateway in front of one LLM upstream.

Exposes a stable API over an upstream whose response shapes differ between
provider backends:

- GET /v1/models: upstream models for the configured provider, normalized
- GET /v1/providers: the upstream provider list, untouched
- POST /v1/chat/completions: streamed passthrough with the provider pinned

Example:
    >>> from llmgateway import create_app, GatewaySettings
    >>> import uvicorn
    >>> settings = GatewaySettings(upstream_url="http://localhost:1337", provider="OpenaiAPI")
    >>> uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
"""

from .config_loader import GatewaySettings, load_config, load_settings
from .core import Gateway, normalize_models
from .logging import logger, setup_logging
from .main import create_app

__all__ = [
    "create_app",
    "Gateway",
    "GatewaySettings",
    "load_config",
    "load_settings",
    "logger",
    "normalize_models",
    "setup_logging",
]
