"""Testing utilities for in-process gateway simulations."""

from .fake_upstream import (
    COMPLETIONS_ROUTE,
    MODELS_ROUTE,
    PROVIDERS_ROUTE,
    FakeUpstream,
    ReceivedRequest,
    UpstreamResponse,
)
from .gateway_harness import GatewayHarness

__all__ = [
    "COMPLETIONS_ROUTE",
    "FakeUpstream",
    "GatewayHarness",
    "MODELS_ROUTE",
    "PROVIDERS_ROUTE",
    "ReceivedRequest",
    "UpstreamResponse",
]
