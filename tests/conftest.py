"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from typing import Generator

import pytest

from llmgateway.config_loader import GatewaySettings


@pytest.fixture
def settings() -> GatewaySettings:
    """Settings for unit tests that never touch the network."""
    return GatewaySettings(upstream_url="http://test-upstream", provider="OpenaiAPI")


@pytest.fixture
def clear_transport_registry() -> Generator[None, None, None]:
    """Clear upstream transport registry after test.

    Use this fixture in tests that register fake transports.
    """
    from llmgateway.core.upstream_transport import clear_upstream_transports

    yield
    clear_upstream_transports()


@pytest.fixture
def harness(clear_transport_registry: None):
    """A gateway serving provider 'OpenaiAPI' in front of a FakeUpstream.

    Usage:
        async def test_models(harness):
            harness.upstream.enqueue_models({"OpenaiAPI": ["gpt-4"]})
            async with harness.make_async_client() as client:
                ...
    """
    from llmgateway.testing import GatewayHarness

    with GatewayHarness(provider="OpenaiAPI") as gateway_harness:
        yield gateway_harness
