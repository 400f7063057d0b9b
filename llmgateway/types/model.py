"""types for the models and related things"""

import enum
from dataclasses import dataclass, field


class ShapeKind(enum.Enum):
    """Known layouts of an upstream "list models" payload."""

    SEQUENCE = "sequence"
    MODELS_FIELD = "models_field"
    DATA_FIELD = "data_field"
    ENCODED_STRING = "encoded_string"
    PROVIDER_KEYED = "provider_keyed"
    UNRECOGNIZED = "unrecognized"


@dataclass
class ModelRecord:
    """a model and the providers exposing it"""

    name: str
    providers: list[str] = field(default_factory=list)
    image: bool = False

    def matches(self, provider_key: str) -> bool:
        """Case-insensitive exact match against any of our providers."""
        wanted = provider_key.lower()
        return any(provider.lower() == wanted for provider in self.providers)
