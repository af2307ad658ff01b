from __future__ import annotations

import asyncio
import hashlib
from typing import Any, Dict, List, Optional, Sequence

import httpx

from factmarket.adapters.arweave.transaction import UnsignedTransaction
from factmarket.observability.metrics import record_deploy_error


PERMISSIONS = ("ACCESS_ADDRESS", "SIGN_TRANSACTION", "DISPATCH")
APP_NAME = "facts-sdk"


class FakeWallet:
    """A deterministic in-memory wallet for tests/dry runs without network.

    Records every call so tests can assert on ordering. Dispatched ids are
    derived from the tx data and tags, so the same tx yields the same id.
    """

    def __init__(self, address: str = "fake-wallet-address", dispatch_id: Optional[str] = None):
        self.address = address
        self.dispatch_id = dispatch_id
        self.connected = False
        self.permissions: List[str] = []
        self.app_info: Dict[str, Any] = {}
        self.calls: List[str] = []
        self.dispatched: List[UnsignedTransaction] = []

    async def connect(self, permissions: Sequence[str], app_info: Optional[Dict[str, Any]] = None) -> None:
        self.calls.append("connect")
        self.connected = True
        self.permissions = list(permissions)
        self.app_info = dict(app_info or {})

    async def disconnect(self) -> None:
        self.calls.append("disconnect")
        self.connected = False
        self.permissions = []

    async def get_active_address(self) -> str:
        self.calls.append("get_active_address")
        if not self.connected:
            raise PermissionError("wallet is not connected")
        return self.address

    async def dispatch(self, tx: UnsignedTransaction) -> Optional[str]:
        self.calls.append("dispatch")
        if "DISPATCH" not in self.permissions:
            raise PermissionError("DISPATCH permission not granted")
        self.dispatched.append(tx)
        if self.dispatch_id is not None:
            tx.id = self.dispatch_id or None
            return tx.id
        h = hashlib.sha256(tx.data.encode("utf-8"))
        for t in tx.tags:
            h.update(f"{t.name}={t.value}".encode("utf-8"))
        tx.id = h.hexdigest()[:43]
        return tx.id


class KeyfileWallet:
    """Wallet backed by a JWK keyfile through arweave-python-client.

    The import is deferred so the SDK works without the dependency when only
    fake or bundling backends are used. The library builds and signs the
    transaction; the signed body is posted to the configured gateway here so
    a rejected submission raises instead of passing silently.
    """

    def __init__(
        self,
        keyfile: str,
        gateway_url: str = "https://arweave.net",
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 10.0,
    ):
        try:
            import arweave  # type: ignore
        except Exception as e:  # noqa: BLE001
            raise NotImplementedError(
                "arweave-python-client is not installed. Install it to dispatch with a keyfile wallet."
            ) from e
        self._wallet = arweave.Wallet(keyfile)
        self.gateway_url = gateway_url.rstrip("/")
        self.client = client or httpx.AsyncClient(base_url=self.gateway_url, timeout=timeout_s)
        self._permissions: List[str] = []

    async def connect(self, permissions: Sequence[str], app_info: Optional[Dict[str, Any]] = None) -> None:
        # a local keyfile holds every permission; keep the granted set for dispatch checks
        self._permissions = list(permissions)

    async def disconnect(self) -> None:
        self._permissions = []

    async def get_active_address(self) -> str:
        return str(self._wallet.address)

    def _sign(self, tx: UnsignedTransaction) -> Any:
        from arweave.arweave_lib import Transaction  # type: ignore

        # data_size must count bytes, not characters
        native = Transaction(self._wallet, data=tx.data.encode("utf-8"))
        # Transaction.__init__ pins the default gateway
        native.api_url = self.gateway_url
        for t in tx.tags:
            native.add_tag(t.name, t.value)
        native.sign()
        return native

    async def dispatch(self, tx: UnsignedTransaction) -> Optional[str]:
        if "DISPATCH" not in self._permissions:
            raise PermissionError("DISPATCH permission not granted")
        native = await asyncio.to_thread(self._sign, tx)
        body = native.json_data
        if isinstance(body, (str, bytes)):
            resp = await self.client.post("/tx", content=body, headers={"Content-Type": "application/json"})
        else:
            resp = await self.client.post("/tx", json=body)
        if resp.status_code >= 400:
            record_deploy_error("arweaveWallet")
        resp.raise_for_status()
        tx.id = getattr(native, "id", None) or None
        return tx.id

    async def aclose(self) -> None:
        await self.client.aclose()


def build_wallet(kind: str = "fake", **kwargs):
    kind = (kind or "fake").lower()
    if kind == "none":
        return None
    if kind == "fake":
        address = str(kwargs.get("address") or "fake-wallet-address")
        return FakeWallet(address=address, dispatch_id=kwargs.get("dispatch_id"))
    if kind == "real":
        keyfile = str(kwargs.get("keyfile", ""))
        if not keyfile:
            raise ValueError("real wallet requires wallet.keyfile")
        return KeyfileWallet(
            keyfile,
            gateway_url=str(kwargs.get("gateway_url", "https://arweave.net")),
            client=kwargs.get("client"),
            timeout_s=float(kwargs.get("timeout_s", 10.0)),
        )
    raise ValueError(f"Unknown wallet kind: {kind}")
