from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
import inspect
from typing import Any, Dict, List, Optional

import httpx

from factmarket.adapters.arweave.schemas import RegisterResponse
from factmarket.core.models import Tag
from factmarket.observability.metrics import record_deploy_error, record_registration


WALLET_SELECTOR = "use_wallet"


@dataclass
class ContractDeploy:
    init_state: str
    src_tx_id: str
    wallet: str = WALLET_SELECTOR
    data: Dict[str, str] = field(default_factory=dict)
    tags: List[Tag] = field(default_factory=list)


@dataclass
class DeployResult:
    contract_tx_id: Optional[str]
    src_tx_id: Optional[str] = None


class FakeWarp:
    """A deterministic fake contract deployer; ``fail_id=True`` returns no contract id."""

    def __init__(self, fail_id: bool = False):
        self.fail_id = fail_id
        self.deploys: List[ContractDeploy] = []
        self.flags: List[bool] = []

    async def deploy_from_source_tx(self, contract: ContractDeploy, disable_bundling: bool = False) -> DeployResult:
        self.deploys.append(contract)
        self.flags.append(disable_bundling)
        if self.fail_id:
            return DeployResult(contract_tx_id=None, src_tx_id=contract.src_tx_id)
        h = hashlib.sha256(contract.init_state.encode("utf-8"))
        for t in contract.tags:
            h.update(f"{t.name}={t.value}".encode("utf-8"))
        return DeployResult(contract_tx_id=f"warp-{h.hexdigest()[:38]}", src_tx_id=contract.src_tx_id)


class WarpClient:
    """Adapter for an injected contract deployment client.

    The inner client exposes ``deploy_from_source_tx(contract: dict, disable_bundling)``
    (or ``deployFromSourceTx``), sync or async, returning an object or mapping with
    ``contractTxId`` / ``contract_tx_id``.
    """

    def __init__(self, client: object):
        self._client = client

    async def deploy_from_source_tx(self, contract: ContractDeploy, disable_bundling: bool = False) -> DeployResult:
        payload: Dict[str, Any] = {
            "initState": contract.init_state,
            "srcTxId": contract.src_tx_id,
            "wallet": contract.wallet,
            "data": dict(contract.data),
            "tags": [t.as_dict() for t in contract.tags],
        }
        inner = self._client
        fn = getattr(inner, "deploy_from_source_tx", None) or getattr(inner, "deployFromSourceTx")
        try:
            raw = fn(payload, disable_bundling)
            if inspect.isawaitable(raw):
                raw = await raw
        except Exception:
            record_deploy_error("warp")
            raise
        if isinstance(raw, dict):
            cid = raw.get("contractTxId") or raw.get("contract_tx_id")
            src = raw.get("srcTxId") or raw.get("src_tx_id")
        else:
            cid = getattr(raw, "contractTxId", None) or getattr(raw, "contract_tx_id", None)
            src = getattr(raw, "srcTxId", None) or getattr(raw, "src_tx_id", None)
        return DeployResult(contract_tx_id=cid or None, src_tx_id=src)


class FakeRegistry:
    def __init__(self):
        self.registered: List[str] = []

    async def register(self, tx_id: str) -> str:
        self.registered.append(tx_id)
        record_registration()
        return tx_id


class WarpRegistryHttpClient:
    """Registers bundled/dispatched contract transactions with the Warp gateway."""

    def __init__(self, base_url: str, bundlr_node: str = "node2", client: Optional[httpx.AsyncClient] = None, timeout_s: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.bundlr_node = bundlr_node
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout_s)

    async def register(self, tx_id: str) -> str:
        resp = await self.client.post("/gateway/contracts/register", json={"id": tx_id, "bundlrNode": self.bundlr_node})
        resp.raise_for_status()
        record_registration()
        try:
            body = RegisterResponse.model_validate(resp.json())
        except ValueError:
            # some gateway versions answer with an empty body
            return tx_id
        return body.contractTxId or body.id or tx_id

    async def aclose(self) -> None:
        await self.client.aclose()


def build_warp(kind: str = "fake", **kwargs):
    kind = (kind or "fake").lower()
    if kind == "fake":
        return FakeWarp(fail_id=bool(kwargs.get("fail_id", False)))
    if kind == "real":
        client = kwargs.get("client")
        if client is None:
            raise NotImplementedError("Real warp backend requires an injected client instance")
        return WarpClient(client)
    raise ValueError(f"Unknown warp kind: {kind}")


def build_registry(kind: str = "fake", **kwargs):
    kind = (kind or "fake").lower()
    if kind == "fake":
        return FakeRegistry()
    if kind == "real":
        base_url = str(kwargs.get("base_url", "https://gateway.warp.cc"))
        return WarpRegistryHttpClient(
            base_url,
            bundlr_node=str(kwargs.get("bundlr_node", "node2")),
            client=kwargs.get("client"),
            timeout_s=float(kwargs.get("timeout_s", 10.0)),
        )
    raise ValueError(f"Unknown registry kind: {kind}")
