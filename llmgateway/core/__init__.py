"""Core module initialization."""

from .catalog import build_model_list, filter_models, render_model_list
from .exceptions import (
    ConfigurationError,
    GatewayError,
    ModelsNotFoundError,
    NoMatchingModelsError,
    NoModelsError,
    StreamRelayError,
    UpstreamError,
    UpstreamResponseError,
    UpstreamUnreachableError,
)
from .forwarder import StreamingForwarder, build_completion_body, build_upstream_headers
from .gateway import Gateway
from .normalizer import classify_payload, coerce_providers, normalize_models, safe_stringify
from .upstream import UpstreamClient

__all__ = [
    "ConfigurationError",
    "Gateway",
    "GatewayError",
    "ModelsNotFoundError",
    "NoMatchingModelsError",
    "NoModelsError",
    "StreamRelayError",
    "StreamingForwarder",
    "UpstreamClient",
    "UpstreamError",
    "UpstreamResponseError",
    "UpstreamUnreachableError",
    "build_completion_body",
    "build_model_list",
    "build_upstream_headers",
    "classify_payload",
    "coerce_providers",
    "filter_models",
    "normalize_models",
    "render_model_list",
    "safe_stringify",
]
