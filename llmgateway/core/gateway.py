"""Per-application composition of the gateway components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .forwarder import StreamingForwarder
from .upstream import UpstreamClient

if TYPE_CHECKING:
    from ..config_loader import GatewaySettings


@dataclass
class Gateway:
    """Settings plus the components built from them.

    One instance lives on ``app.state.gateway``. It holds no per-request
    state, so concurrent requests never interfere.
    """

    settings: GatewaySettings
    upstream: UpstreamClient = field(init=False)
    forwarder: StreamingForwarder = field(init=False)

    def __post_init__(self) -> None:
        self.upstream = UpstreamClient(self.settings)
        self.forwarder = StreamingForwarder(self.settings)
