import json

import httpx
import pytest

from factmarket.adapters.arweave.gateway_http import GatewayHttpClient
from factmarket.adapters.arweave.vouch import FakeVouch
from factmarket.adapters.arweave.wallet import FakeWallet
from factmarket.adapters.bundlr.bundlr import FakeBundlr
from factmarket.adapters.warp.warp import FakeRegistry, FakeWarp
from factmarket.core.models import AttachFactMarketInput
from factmarket.deploy.clients import Clients
from factmarket.deploy.fact_market import attach_fact_market
from factmarket.observability.metrics import attach_errors


def _gateway(tags, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status)
        tx_id = json.loads(request.content)["variables"]["id"]
        return httpx.Response(200, json={"data": {"transaction": {"id": tx_id, "tags": tags}}})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://gw.example")
    return GatewayHttpClient("https://gw.example", client=client)


def _clients(tags=None, vouched=True, wallet=None, status=200, **kw):
    return Clients(
        gateway=_gateway(tags if tags is not None else [{"name": "Title", "value": "Foo"}], status=status),
        vouch=FakeVouch(allow_all=vouched),
        wallet=wallet if wallet is not None else FakeWallet(address="W1", dispatch_id="X1"),
        bundlr=kw.get("bundlr") or FakeBundlr(),
        warp=kw.get("warp") or FakeWarp(),
        registry=kw.get("registry") or FakeRegistry(),
    )


@pytest.mark.asyncio
async def test_attach_with_wallet_dispatches_and_registers():
    clients = _clients()
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1"), clients)
    assert res == {"tx": "X1"}
    assert clients.registry.registered == ["X1"]
    tx = clients.wallet.dispatched[0]
    assert tx.tag_values("Title") == ["Foo"]
    assert tx.tag_values("Data-Source") == ["T1"]
    assert tx.tag_values("Protocol-Name") == ["Facts"]
    assert tx.tag_values("Render-With") == ["render-attached-tx"]
    state = json.loads(tx.tag_values("Init-State")[0])
    assert state["name"] == "Foo" and state["creator"] == "W1"


@pytest.mark.asyncio
async def test_attach_non_vouched_owner_is_error():
    clients = _clients(vouched=False)
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1"), clients)
    assert res == {"error": "non-vouched"}
    assert clients.wallet.calls == []
    assert clients.registry.registered == []


@pytest.mark.asyncio
async def test_attach_unsupported_backend_is_error():
    before = attach_errors()
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1", use="bogus"), _clients())
    assert res == {"error": "Wallet bogus not supported."}
    assert attach_errors() == before + 1


@pytest.mark.asyncio
async def test_attach_lookup_failure_is_error_not_raise():
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1"), _clients(status=503))
    assert set(res) == {"error"}
    assert "503" in res["error"]


@pytest.mark.asyncio
async def test_attach_with_bundlr_and_rebuttal():
    clients = _clients()
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1", rebut_tx="R1", use="bundlr"), clients)
    assert set(res) == {"tx"}
    tags = clients.bundlr.uploads[0]["tags"]
    rebuts = [t for t in tags if t.name == "Fact-Rebuts"]
    assert len(rebuts) == 1 and rebuts[0].value == "R1"
    assert clients.registry.registered == [res["tx"]]
    names = [t.name for t in tags]
    assert "App-Name" in names and "Implements" in names


@pytest.mark.asyncio
async def test_attach_with_warp_skips_registry():
    clients = _clients()
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1", use="warp"), clients)
    assert res["tx"].startswith("warp-")
    assert clients.registry.registered == []
    deploy = clients.warp.deploys[0]
    assert json.loads(deploy.init_state)["creator"] == "W1"
    assert not any(t.name == "Init-State" for t in deploy.tags)


@pytest.mark.asyncio
async def test_attach_unknown_target_still_deploys_without_ans110():
    def handler(request):
        return httpx.Response(200, json={"data": {"transaction": None}})

    clients = _clients()
    clients.gateway = GatewayHttpClient(
        "https://gw.example",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://gw.example"),
    )
    res = await attach_fact_market(AttachFactMarketInput(tx="T9", wallet="W1", use="bundlr"), clients)
    assert "tx" in res
    init = [t for t in clients.bundlr.uploads[0]["tags"] if t.name == "Init-State"][0]
    assert json.loads(init.value)["name"] == "No title."


class RejectingWallet(FakeWallet):
    async def dispatch(self, tx):
        await super().dispatch(tx)
        request = httpx.Request("POST", "https://gw.example/tx")
        raise httpx.HTTPStatusError(
            "Client error '400 Bad Request'", request=request, response=httpx.Response(400, request=request)
        )


@pytest.mark.asyncio
async def test_attach_reports_gateway_rejection_without_registering():
    clients = _clients(wallet=RejectingWallet(address="W1"))
    res = await attach_fact_market(AttachFactMarketInput(tx="T1", wallet="W1"), clients)
    assert res == {"error": "Client error '400 Bad Request'"}
    assert clients.registry.registered == []
