from __future__ import annotations

import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional

from factmarket.adapters.arweave.schemas import GraphQLResponse
from factmarket.adapters.arweave.transaction import UnsignedTransaction
from factmarket.core.errors import GatewayError
from factmarket.core.models import Tag, Tags


TX_TAGS_QUERY = """
query GetTx($id: ID!) {
  transaction(id: $id) {
    id
    tags { name value }
  }
}
"""


@dataclass
class TxInfo:
    id: str
    tags: Tags


class GatewayHttpClient:
    """Arweave gateway access: transaction lookup over GraphQL and local tx construction."""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None, timeout_s: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout_s)

    async def graphql(self, query: str, variables: Dict[str, Any]) -> GraphQLResponse:
        resp = await self.client.post("/graphql", json={"query": query, "variables": variables})
        resp.raise_for_status()
        parsed = GraphQLResponse.model_validate(resp.json())
        if parsed.errors:
            msg = "; ".join(str(e.get("message", e)) for e in parsed.errors)
            raise GatewayError(f"gateway query failed: {msg}")
        return parsed

    async def get_tx(self, tx_id: str) -> Optional[TxInfo]:
        """Return the transaction's tags, or None when the gateway does not know the id."""
        parsed = await self.graphql(TX_TAGS_QUERY, {"id": tx_id})
        node = parsed.data.transaction if parsed.data else None
        if node is None:
            return None
        return TxInfo(id=node.id, tags=tuple(Tag(name=t.name, value=t.value) for t in node.tags))

    def create_transaction(self, data: str) -> UnsignedTransaction:
        return UnsignedTransaction(data=data)

    async def aclose(self) -> None:
        await self.client.aclose()
