"""Provider filtering and rendering of the stable /v1/models contract."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from ..types import ModelRecord
from .exceptions import NoMatchingModelsError, NoModelsError
from .normalizer import normalize_models, safe_stringify

if TYPE_CHECKING:
    from ..config_loader import GatewaySettings

logger = logging.getLogger("llm-gateway")

NO_MATCH_SAMPLE_SIZE = 5


def filter_models(records: Sequence[ModelRecord], provider_key: str) -> list[ModelRecord]:
    """Keep the records exposed by ``provider_key`` (case-insensitive)."""
    return [record for record in records if record.matches(provider_key)]


def render_model(record: ModelRecord) -> dict[str, Any]:
    # created/owned_by/provider are fixed; upstream values never leak through
    return {
        "id": record.name,
        "object": "model",
        "created": 0,
        "owned_by": "",
        "image": record.image or False,
        "provider": True,
    }


def render_model_list(records: Sequence[ModelRecord]) -> dict[str, Any]:
    return {
        "object": "list",
        "data": [render_model(record) for record in records],
    }


def _describe(records: Sequence[ModelRecord]) -> list[dict[str, Any]]:
    return [{"name": record.name, "providers": record.providers} for record in records]


def build_model_list(raw: Any, settings: GatewaySettings) -> dict[str, Any]:
    """Normalize an upstream payload and render the configured provider's models.

    Raises:
        NoModelsError: The payload held no usable models.
        NoMatchingModelsError: Models exist, but none for our provider.
    """
    provider_key = settings.provider_key
    records = normalize_models(raw, source=settings.models_url)

    if not records:
        msg = (
            f"No models found for provider '{provider_key}' from upstream "
            f"{settings.upstream_url}. Upstream response shape: {safe_stringify(raw)}"
        )
        logger.error(msg)
        raise NoModelsError(msg, provider_key=provider_key)

    matched = filter_models(records, provider_key)
    if not matched:
        sample = safe_stringify(_describe(records[:NO_MATCH_SAMPLE_SIZE]))
        msg = (
            f"No models matched provider '{provider_key}' in upstream "
            f"{settings.upstream_url}. Sample upstream models: {sample}"
        )
        logger.error(msg)
        raise NoMatchingModelsError(msg, provider_key=provider_key)

    logger.info(
        f"Serving {len(matched)} of {len(records)} upstream models for provider '{provider_key}'"
    )
    return render_model_list(matched)
