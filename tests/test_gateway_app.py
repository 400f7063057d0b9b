"""In-process tests of the gateway app against a fake upstream."""

import json

import httpx
import pytest

from llmgateway.config_loader import GatewaySettings
from llmgateway.core.upstream_transport import register_upstream_transport
from llmgateway.main import create_app
from llmgateway.testing import COMPLETIONS_ROUTE, MODELS_ROUTE, PROVIDERS_ROUTE


# =============================================================================
# GET /v1/models
# =============================================================================


@pytest.mark.asyncio
async def test_models_provider_keyed_format(harness):
    harness.upstream.enqueue_models(
        {
            "Anthropic": ["claude-3-opus", "claude-3-sonnet"],
            "OpenaiAPI": ["gpt-4", "claude-3-opus"],
        }
    )

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models", headers={"Authorization": "Bearer test"})

    assert response.status_code == 200
    body = response.json()
    assert body["object"] == "list"
    assert sorted(model["id"] for model in body["data"]) == ["claude-3-opus", "gpt-4"]
    for model in body["data"]:
        assert model["object"] == "model"
        assert model["created"] == 0
        assert model["owned_by"] == ""
        assert model["image"] is False
        assert model["provider"] is True


@pytest.mark.asyncio
async def test_models_forwards_authorization(harness):
    harness.upstream.enqueue_models({"OpenaiAPI": ["gpt-4"]})

    async with harness.make_async_client() as client:
        await client.get("/v1/models", headers={"Authorization": "Bearer secret"})

    (received,) = harness.upstream.requests_for(MODELS_ROUTE)
    assert received.headers["authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_models_without_authorization(harness):
    harness.upstream.enqueue_models({"OpenaiAPI": ["gpt-4"]})

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models")

    assert response.status_code == 200
    (received,) = harness.upstream.requests_for(MODELS_ROUTE)
    assert "authorization" not in received.headers


@pytest.mark.asyncio
async def test_models_double_encoded_json_string(harness):
    harness.upstream.enqueue_models(
        json.dumps({"models": [{"name": "gpt-4", "providers": ["OpenaiAPI"], "image": True}]})
    )

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models")

    assert response.status_code == 200
    assert response.json()["data"][0]["id"] == "gpt-4"
    assert response.json()["data"][0]["image"] is True


@pytest.mark.asyncio
async def test_models_no_data_returns_404(harness):
    harness.upstream.enqueue_models_text("upstream is warming up")

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models")

    assert response.status_code == 404
    error = response.json()["detail"]["error"]
    assert error["code"] == "no_models"
    assert error["type"] == "not_found_error"
    assert "upstream is warming up" in error["message"]


@pytest.mark.asyncio
async def test_models_no_match_returns_404(harness):
    harness.upstream.enqueue_models({"Anthropic": ["claude-3-opus"]})

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models")

    assert response.status_code == 404
    error = response.json()["detail"]["error"]
    assert error["code"] == "no_matching_models"
    assert "claude-3-opus" in error["message"]


@pytest.mark.asyncio
async def test_models_upstream_error_status_returns_502(harness):
    harness.upstream.enqueue_models({"error": "internal"}, status_code=500)

    async with harness.make_async_client() as client:
        response = await client.get("/v1/models")

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "upstream_error"


@pytest.mark.asyncio
async def test_models_unreachable_upstream_returns_502(clear_transport_registry):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    register_upstream_transport("down.local", httpx.MockTransport(refuse))
    app = create_app(GatewaySettings(upstream_url="http://down.local", provider="OpenaiAPI"))

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://gateway.local"
    ) as client:
        response = await client.get("/v1/models")

    assert response.status_code == 502
    error = response.json()["detail"]["error"]
    assert error["code"] == "upstream_unreachable"
    assert "connection refused" in error["message"]


# =============================================================================
# GET /v1/providers
# =============================================================================


@pytest.mark.asyncio
async def test_providers_passthrough_is_verbatim(harness):
    raw = '[ {"name": "OpenaiAPI", "label": "OpenAI"},  {"name": "Anthropic"} ]'
    harness.upstream.enqueue_providers(raw)

    async with harness.make_async_client() as client:
        response = await client.get("/v1/providers", headers={"Authorization": "Bearer t"})

    assert response.status_code == 200
    assert response.text == raw
    assert response.headers["content-type"].startswith("application/json")
    (received,) = harness.upstream.requests_for(PROVIDERS_ROUTE)
    assert received.headers["authorization"] == "Bearer t"


# =============================================================================
# POST /v1/chat/completions
# =============================================================================


@pytest.mark.asyncio
async def test_chat_relays_stream_and_injects_provider(harness):
    chunks = [
        'data: {"choices": [{"delta": {"content": "Hel"}}]}\n\n',
        'data: {"choices": [{"delta": {"content": "lo"}}]}\n\n',
        "data: [DONE]\n\n",
    ]
    harness.upstream.enqueue_stream(chunks)

    async with harness.make_async_client() as client:
        response = await client.post(
            "/v1/chat/completions",
            json={
                "model": "gpt-4",
                "stream": True,
                "provider": "SomethingElse",
                "messages": [{"role": "user", "content": "hi"}],
            },
            headers={"Authorization": "Bearer test"},
        )

    assert response.status_code == 200
    assert response.text == "".join(chunks)
    assert response.headers["content-type"].startswith("text/event-stream")

    (received,) = harness.upstream.requests_for(COMPLETIONS_ROUTE)
    sent = received.json()
    assert sent["provider"] == "OpenaiAPI"
    assert sent["model"] == "gpt-4"
    assert sent["messages"] == [{"role": "user", "content": "hi"}]
    assert received.headers["authorization"] == "Bearer test"
    assert received.headers["accept"] == "application/json"
    assert received.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_chat_without_authorization(harness):
    harness.upstream.enqueue_stream(["data: [DONE]\n\n"])

    async with harness.make_async_client() as client:
        response = await client.post("/v1/chat/completions", json={"model": "gpt-4"})

    assert response.status_code == 200
    (received,) = harness.upstream.requests_for(COMPLETIONS_ROUTE)
    assert "authorization" not in received.headers


@pytest.mark.asyncio
async def test_chat_relays_upstream_error_status(harness):
    harness.upstream.enqueue_stream(
        ['{"error": {"message": "model not found"}}'],
        status_code=404,
        media_type="application/json",
    )

    async with harness.make_async_client() as client:
        response = await client.post("/v1/chat/completions", json={"model": "nope"})

    assert response.status_code == 404
    assert response.json() == {"error": {"message": "model not found"}}


@pytest.mark.asyncio
async def test_chat_rejects_invalid_json(harness):
    async with harness.make_async_client() as client:
        response = await client.post(
            "/v1/chat/completions",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "invalid_json"
    assert harness.upstream.requests_for(COMPLETIONS_ROUTE) == []


@pytest.mark.asyncio
async def test_chat_rejects_invalid_utf8(harness):
    async with harness.make_async_client() as client:
        response = await client.post(
            "/v1/chat/completions",
            content=b'{"model": "\xff"}',
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "invalid_json"
    assert harness.upstream.requests_for(COMPLETIONS_ROUTE) == []


@pytest.mark.asyncio
async def test_chat_rejects_non_object_body(harness):
    async with harness.make_async_client() as client:
        response = await client.post("/v1/chat/completions", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "invalid_json_shape"


@pytest.mark.asyncio
async def test_chat_unreachable_upstream_returns_502(clear_transport_registry):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    register_upstream_transport("down.local", httpx.MockTransport(refuse))
    app = create_app(GatewaySettings(upstream_url="http://down.local", provider="OpenaiAPI"))

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://gateway.local"
    ) as client:
        response = await client.post("/v1/chat/completions", json={"model": "gpt-4"})

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "upstream_unreachable"


@pytest.mark.asyncio
async def test_concurrent_requests_do_not_interfere(harness):
    import asyncio

    harness.upstream.enqueue_models({"OpenaiAPI": ["gpt-4"]})
    harness.upstream.enqueue_models({"OpenaiAPI": ["gpt-4o"], "Anthropic": ["claude"]})
    harness.upstream.enqueue_stream(["data: [DONE]\n\n"])

    async with harness.make_async_client() as client:
        first, second, chat = await asyncio.gather(
            client.get("/v1/models"),
            client.get("/v1/models"),
            client.post("/v1/chat/completions", json={"model": "gpt-4"}),
        )

    ids = sorted(
        model["id"] for response in (first, second) for model in response.json()["data"]
    )
    assert ids == ["gpt-4", "gpt-4o"]
    assert chat.status_code == 200
