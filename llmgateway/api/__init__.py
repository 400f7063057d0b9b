"""API module for the gateway."""

from .routes import chat_completions, list_models, list_providers

__all__ = [
    "chat_completions",
    "list_models",
    "list_providers",
]
