"""Core exceptions for the gateway."""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(GatewayError):
    """Raised when there's an issue with the configuration."""
    pass


class UpstreamError(GatewayError):
    """Base class for failures talking to the upstream."""

    code = "upstream_error"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamUnreachableError(UpstreamError):
    """Transport-level failure contacting the upstream."""

    code = "upstream_unreachable"


class UpstreamResponseError(UpstreamError):
    """The upstream answered with an error status."""

    code = "upstream_error"


class StreamRelayError(UpstreamError):
    """The upstream stream ended abnormally after the relay started."""

    code = "stream_relay_failed"


class ModelsNotFoundError(GatewayError):
    """No models can be offered for the configured provider."""

    code = "models_not_found"

    def __init__(self, message: str, provider_key: str) -> None:
        super().__init__(message)
        self.provider_key = provider_key


class NoModelsError(ModelsNotFoundError):
    """The upstream returned nothing usable as a model list.

    Entries that are not objects, or carry neither ``name`` nor ``id``, are
    dropped during normalization. A listing made only of such entries
    (``["gpt-4"]``, ``{"models": ["gpt-4"]}``) therefore ends up here rather
    than in :class:`NoMatchingModelsError`.
    """

    code = "no_models"


class NoMatchingModelsError(ModelsNotFoundError):
    """The upstream had models, but none for the configured provider."""

    code = "no_matching_models"
