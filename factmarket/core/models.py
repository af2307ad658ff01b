from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from factmarket.core.errors import UnsupportedBackend


PLACEHOLDER_DATA = json.dumps({"facts": "sdk"})


@dataclass(frozen=True)
class Tag:
    name: str
    value: str

    def as_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


Tags = Tuple[Tag, ...]


def to_tags(raw: Sequence[Any] | None) -> Tags:
    """Normalise tags given as Tag, dict or (name, value) pairs into an immutable tuple."""
    out = []
    for t in raw or ():
        if isinstance(t, Tag):
            out.append(t)
        elif isinstance(t, dict):
            out.append(Tag(name=str(t["name"]), value=str(t["value"])))
        else:
            name, value = t
            out.append(Tag(name=str(name), value=str(value)))
    return tuple(out)


class Backend(str, Enum):
    BUNDLR = "bundlr"
    WARP = "warp"
    ARWEAVE_WALLET = "arweaveWallet"

    @classmethod
    def parse(cls, use: "Use") -> "Backend":
        if use is None:
            return cls.ARWEAVE_WALLET
        if isinstance(use, Backend):
            return use
        for b in cls:
            if b.value == use:
                return b
        raise UnsupportedBackend(f"Wallet {use} not supported.")


Use = Union[Backend, str, None]


@dataclass(frozen=True)
class DeployFactMarketInput:
    tags: Tags
    owner: str
    attach_to: Optional[str]
    rebut_tx: Optional[str] = None
    use: Use = None
    data: str = PLACEHOLDER_DATA
    content_type: str = "text/plain"

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", to_tags(self.tags))


@dataclass(frozen=True)
class AttachFactMarketInput:
    tx: str
    wallet: str
    rebut_tx: Optional[str] = None
    use: Use = None


@dataclass(frozen=True)
class DeployAtomicFactMarketInput:
    tags: Tags
    data: str
    owner: str
    content_type: str = "text/plain"
    rebut_tx: Optional[str] = None
    use: Use = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", to_tags(self.tags))


# {"tx": id} on success, {"error": message} on failure
Result = Dict[str, str]


def ok(tx_id: str) -> Result:
    return {"tx": tx_id}


def err(message: str) -> Result:
    return {"error": message}
