from __future__ import annotations

from dataclasses import dataclass
import hashlib
import inspect
from typing import Any, Dict, List, Optional, Sequence

from factmarket.core.models import Tag
from factmarket.observability.metrics import record_deploy_error


@dataclass
class UploadResult:
    id: Optional[str]
    timestamp: Optional[int] = None


class FakeBundlr:
    """A deterministic fake bundling node for tests/integration without network.

    Rules:
    - Every upload is accepted and gets a content-derived id
    - ``fail_id=True`` simulates a node answering without an id
    """

    def __init__(self, fail_id: bool = False):
        self.fail_id = fail_id
        self.uploads: List[Dict[str, Any]] = []

    async def upload(self, data: str, tags: Sequence[Tag]) -> UploadResult:
        self.uploads.append({"data": data, "tags": list(tags)})
        if self.fail_id:
            return UploadResult(id=None)
        h = hashlib.sha256(data.encode("utf-8"))
        for t in tags:
            h.update(f"{t.name}={t.value}".encode("utf-8"))
        return UploadResult(id=f"bundlr-{h.hexdigest()[:36]}")


class BundlrClient:
    """Adapter for an injected bundling client.

    The inner client must expose ``upload(data, tags=[{"name", "value"}])``,
    sync or async, returning an object or mapping carrying ``id``.
    """

    def __init__(self, client: object):
        self._client = client

    async def upload(self, data: str, tags: Sequence[Tag]) -> UploadResult:
        payload = [t.as_dict() for t in tags]
        try:
            raw = self._client.upload(data, tags=payload)
            if inspect.isawaitable(raw):
                raw = await raw
        except Exception:
            record_deploy_error("bundlr")
            raise
        if isinstance(raw, dict):
            return UploadResult(id=raw.get("id") or None, timestamp=raw.get("timestamp"))
        return UploadResult(id=getattr(raw, "id", None) or None, timestamp=getattr(raw, "timestamp", None))


def build_bundlr(kind: str = "fake", **kwargs):
    kind = (kind or "fake").lower()
    if kind == "fake":
        return FakeBundlr(fail_id=bool(kwargs.get("fail_id", False)))
    if kind == "real":
        client = kwargs.get("client")
        if client is None:
            raise NotImplementedError("Real bundlr backend requires an injected client instance")
        return BundlrClient(client)
    raise ValueError(f"Unknown bundlr kind: {kind}")
