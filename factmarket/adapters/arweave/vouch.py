from __future__ import annotations

from typing import Iterable, List, Optional

from factmarket.adapters.arweave.gateway_http import GatewayHttpClient


VOUCH_QUERY = """
query IsVouched($address: String!) {
  transactions(
    tags: [
      { name: "App-Name", values: ["Vouch"] }
      { name: "Vouch-For", values: [$address] }
    ]
    first: 1
  ) {
    edges { node { id } }
  }
}
"""


class FakeVouch:
    """Allow-list vouching for tests and dry runs."""

    def __init__(self, allow: Optional[Iterable[str]] = None, allow_all: bool = False):
        self.allow = set(allow or ())
        self.allow_all = allow_all
        self.checked: List[str] = []

    async def is_vouched(self, address: str) -> bool:
        self.checked.append(address)
        return self.allow_all or address in self.allow


class VouchHttpClient:
    """Checks VouchDAO vouch transactions (``Vouch-For`` tag) through the gateway."""

    def __init__(self, gateway: GatewayHttpClient):
        self.gateway = gateway

    async def is_vouched(self, address: str) -> bool:
        if not address:
            return False
        parsed = await self.gateway.graphql(VOUCH_QUERY, {"address": address})
        conn = parsed.data.transactions if parsed.data else None
        return bool(conn and conn.edges)


def build_vouch(kind: str = "fake", **kwargs):
    kind = (kind or "fake").lower()
    if kind == "fake":
        return FakeVouch(allow=kwargs.get("allow"), allow_all=bool(kwargs.get("allow_all", False)))
    if kind == "real":
        gateway = kwargs.get("gateway")
        if gateway is None:
            raise ValueError("real vouch client requires a gateway")
        return VouchHttpClient(gateway)
    raise ValueError(f"Unknown vouch kind: {kind}")
