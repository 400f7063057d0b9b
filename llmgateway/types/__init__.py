"""Type definitions shared across the gateway."""

from .model import ModelRecord, ShapeKind

__all__ = [
    "ModelRecord",
    "ShapeKind",
]
