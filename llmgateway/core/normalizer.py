"""Normalization of upstream "list models" payloads.

Upstream backends disagree on how models are listed. Some return a list of
model objects (possibly wrapped in ``models`` or ``data``, possibly as a JSON
encoded string), others return a mapping of provider name to model names::

    {"Anthropic": ["claude-3-opus"], "OpenaiAPI": ["gpt-4", "claude-3-opus"]}

``classify_payload`` decides which layout a payload is in, and
``normalize_models`` turns any of them into a list of ``ModelRecord``.
Normalization never raises: anything it cannot interpret becomes an empty
list and the caller decides what emptiness means.
"""

import json
import logging
from typing import Any, Iterable, Mapping

from ..types import ModelRecord, ShapeKind

logger = logging.getLogger("llm-gateway")

DEFAULT_SAMPLE_LIMIT = 1000
PARSE_FAILURE_SAMPLE_LIMIT = 500


def safe_stringify(value: Any, limit: int = DEFAULT_SAMPLE_LIMIT) -> str:
    """Render arbitrary upstream data for logs and error messages.

    Never raises. Output longer than ``limit`` is cut and suffixed with
    ``... (truncated)``.
    """
    try:
        text = value if isinstance(value, str) else json.dumps(value, default=str)
    except Exception:
        try:
            text = str(value)
        except Exception:
            return "[unserializable]"
    if len(text) > limit:
        return text[:limit] + "... (truncated)"
    return text


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def classify_payload(raw: Any) -> ShapeKind:
    """Classify a raw upstream payload. First matching rule wins."""
    if isinstance(raw, list):
        return ShapeKind.SEQUENCE
    if isinstance(raw, Mapping):
        if isinstance(raw.get("models"), list):
            return ShapeKind.MODELS_FIELD
        if isinstance(raw.get("data"), list):
            return ShapeKind.DATA_FIELD
    if isinstance(raw, str):
        return ShapeKind.ENCODED_STRING
    if isinstance(raw, Mapping) and all(_is_string_list(v) for v in raw.values()):
        # NOTE: {} and {"x": []} land here too and normalize to nothing
        return ShapeKind.PROVIDER_KEYED
    return ShapeKind.UNRECOGNIZED


def coerce_providers(value: Any) -> list[str]:
    """Normalize a record's ``providers`` field to a list of strings."""
    if isinstance(value, (list, tuple)):
        return [str(provider) for provider in value]
    if isinstance(value, Mapping):
        return [str(key) for key in value.keys()]
    if isinstance(value, str):
        return [value]
    return []


def records_from_sequence(items: Iterable[Any]) -> list[ModelRecord]:
    """Build records from model-like entries, reading fields defensively."""
    records: list[ModelRecord] = []
    for item in items:
        if not isinstance(item, Mapping):
            logger.debug(f"Skipping non-object model entry: {safe_stringify(item, 200)}")
            continue
        name = item.get("name")
        if name is None:
            name = item.get("id")
        if name is None:
            logger.debug(f"Skipping model entry without a name: {safe_stringify(item, 200)}")
            continue
        records.append(
            ModelRecord(
                name=str(name),
                providers=coerce_providers(item.get("providers")),
                image=bool(item.get("image") or False),
            )
        )
    return records


def invert_provider_map(raw: Mapping[str, list[str]]) -> list[ModelRecord]:
    """Turn ``{provider: [model, ...]}`` into one record per unique model.

    Providers are attached in first-seen order; a provider listing the same
    model twice is only recorded once.
    """
    providers_by_model: dict[str, list[str]] = {}
    for provider_name, model_names in raw.items():
        for model_name in model_names:
            providers = providers_by_model.setdefault(model_name, [])
            if provider_name not in providers:
                providers.append(provider_name)

    logger.debug(
        f"Transformed provider-keyed format: {len(providers_by_model)} unique models "
        f"from {len(raw)} providers"
    )
    return [
        ModelRecord(name=name, providers=providers)
        for name, providers in providers_by_model.items()
    ]


def _unwrap_listing(raw: Any, kind: ShapeKind) -> list[Any] | None:
    if kind is ShapeKind.SEQUENCE:
        return raw
    if kind is ShapeKind.MODELS_FIELD:
        return raw["models"]
    if kind is ShapeKind.DATA_FIELD:
        return raw["data"]
    return None


def normalize_models(raw: Any, source: str = "upstream") -> list[ModelRecord]:
    """Normalize any known upstream payload into a list of ModelRecord.

    Args:
        raw: The decoded upstream body (JSON value or raw text).
        source: Where the payload came from, used in log messages.

    Returns:
        The canonical model list, possibly empty.
    """
    kind = classify_payload(raw)

    listing = _unwrap_listing(raw, kind)
    if listing is not None:
        return records_from_sequence(listing)

    if kind is ShapeKind.ENCODED_STRING:
        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            logger.warning(
                f"Unable to parse string response from {source}: "
                f"{safe_stringify(raw, PARSE_FAILURE_SAMPLE_LIMIT)} ({exc})"
            )
            return []
        # Only list layouts are unwrapped from an encoded string
        listing = _unwrap_listing(parsed, classify_payload(parsed))
        if listing is None:
            logger.warning(
                f"Unexpected models response shape inside string from {source}: "
                f"{safe_stringify(parsed)}"
            )
            return []
        return records_from_sequence(listing)

    if kind is ShapeKind.PROVIDER_KEYED:
        return invert_provider_map(raw)

    logger.warning(
        f"Unexpected models response shape from {source}: {safe_stringify(raw)}"
    )
    return []
