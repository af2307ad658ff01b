import json

import httpx
import pytest

from factmarket.adapters.warp.warp import FakeRegistry, build_registry
from factmarket.observability.metrics import registrations


@pytest.mark.asyncio
async def test_registry_posts_id_and_bundlr_node():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"contractTxId": "X1"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://warp.example")
    reg = build_registry("real", base_url="https://warp.example", bundlr_node="node1", client=client)
    before = registrations()
    assert await reg.register("X1") == "X1"
    assert seen["path"] == "/gateway/contracts/register"
    assert seen["body"] == {"id": "X1", "bundlrNode": "node1"}
    assert registrations() == before + 1


@pytest.mark.asyncio
async def test_registry_empty_body_returns_input_id():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)), base_url="https://warp.example")
    reg = build_registry("real", base_url="https://warp.example", client=client)
    assert await reg.register("X2") == "X2"


@pytest.mark.asyncio
async def test_registry_http_error_propagates():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)), base_url="https://warp.example")
    reg = build_registry("real", base_url="https://warp.example", client=client)
    with pytest.raises(httpx.HTTPStatusError):
        await reg.register("X3")


@pytest.mark.asyncio
async def test_fake_registry_records():
    reg = build_registry("fake")
    assert isinstance(reg, FakeRegistry)
    await reg.register("a")
    assert reg.registered == ["a"]
