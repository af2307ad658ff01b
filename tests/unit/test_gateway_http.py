import json

import httpx
import pytest

from factmarket.adapters.arweave.gateway_http import GatewayHttpClient
from factmarket.core.errors import GatewayError
from factmarket.core.models import Tag


def _gateway(handler) -> GatewayHttpClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://gw.example")
    return GatewayHttpClient(base_url="https://gw.example", client=client)


@pytest.mark.asyncio
async def test_get_tx_returns_tags():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/graphql"
        body = json.loads(request.content)
        assert body["variables"] == {"id": "T1"}
        return httpx.Response(
            200,
            json={"data": {"transaction": {"id": "T1", "tags": [{"name": "Title", "value": "Foo"}]}}},
        )

    info = await _gateway(handler).get_tx("T1")
    assert info is not None
    assert info.id == "T1"
    assert info.tags == (Tag("Title", "Foo"),)


@pytest.mark.asyncio
async def test_get_tx_unknown_returns_none():
    gw = _gateway(lambda request: httpx.Response(200, json={"data": {"transaction": None}}))
    assert await gw.get_tx("nope") is None


@pytest.mark.asyncio
async def test_get_tx_graphql_errors_raise():
    gw = _gateway(lambda request: httpx.Response(200, json={"errors": [{"message": "bad id"}]}))
    with pytest.raises(GatewayError, match="bad id"):
        await gw.get_tx("x")


@pytest.mark.asyncio
async def test_get_tx_http_error_raises():
    gw = _gateway(lambda request: httpx.Response(502))
    with pytest.raises(httpx.HTTPStatusError):
        await gw.get_tx("x")


def test_create_transaction_collects_tags():
    gw = GatewayHttpClient("https://gw.example", client=httpx.AsyncClient())
    tx = gw.create_transaction('{"facts": "sdk"}')
    tx.add_tag("A", "1")
    tx.add_tag("A", "2")
    assert tx.data == '{"facts": "sdk"}'
    assert tx.tag_values("A") == ["1", "2"]
    assert tx.id is None
