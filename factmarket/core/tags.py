from __future__ import annotations

import copy
import json
from typing import Any, Dict, Iterable, Optional

from factmarket.config import DEFAULT_FACT_MARKET_SRC
from factmarket.core.models import Tag, Tags, to_tags


RENDER_WITH = "render-attached-tx"
PROTOCOL_NAME = "Facts"

# Fallback display names differ between the wallet path and the others.
NO_TITLE = "No title."
NO_TITLE_WALLET = "bug: no title."

ANS110_SINGLE = ("Title", "Type", "Description")
ANS110_TOPIC_PREFIX = "Topic:"

INITIAL_STATE: Dict[str, Any] = {
    "ticker": "PF-FACT",
    "name": "",
    "creator": "",
    "balances": {},
    "claimable": [],
    "divisibility": 1000000,
    "pair": "",
    "settings": [["isTradeable", True]],
}


def get_ans110_tags(tags: Optional[Iterable[Any]]) -> Tags:
    """Select the ANS-110 descriptor tags from an existing transaction.

    Keeps the first ``Title``, ``Type`` and ``Description`` tag plus every
    ``Topic:*`` tag, in that order. Missing tags yield an empty tuple.
    """
    src = to_tags(list(tags or ()))
    out = []
    for name in ANS110_SINGLE:
        first = next((t for t in src if t.name == name), None)
        if first is not None:
            out.append(first)
    out.extend(t for t in src if t.name.startswith(ANS110_TOPIC_PREFIX))
    return tuple(out)


def get_smartweave_tags(src_tx_id: str = DEFAULT_FACT_MARKET_SRC, content_type: str = "text/plain") -> Tags:
    return (
        Tag("App-Name", "SmartWeaveContract"),
        Tag("App-Version", "0.3.0"),
        Tag("Contract-Src", src_tx_id),
        Tag("Content-Type", content_type),
    )


def get_permafacts_tags() -> Tags:
    return (
        Tag("Implements", "ANS-110"),
        Tag("Permafacts-Type", "Fact-Market"),
        Tag("Permafacts-Version", "Alpha"),
    )


def fact_protocol_tags(attach_to: Optional[str], rebut_tx: Optional[str], render_first: bool = False) -> Tags:
    """Fixed fact protocol tags.

    Attached markets carry ``Fact-Rebuts`` first, then the renderer and source
    tags. The wallet path writes ``Render-With`` ahead of ``Data-Source``; the
    bundling and contract paths write it last. Unattached markets only carry
    ``Protocol-Name`` followed by ``Fact-Rebuts``.
    """
    rebuts = (Tag("Fact-Rebuts", rebut_tx),) if rebut_tx else ()
    protocol = Tag("Protocol-Name", PROTOCOL_NAME)
    if not attach_to:
        return (protocol,) + rebuts
    render = Tag("Render-With", RENDER_WITH)
    source = Tag("Data-Source", attach_to)
    if render_first:
        return rebuts + (render, source, protocol)
    return rebuts + (source, protocol, render)


def find_title(tags: Iterable[Tag]) -> Optional[str]:
    for t in tags:
        if t.name == "Title":
            return t.value or None
    return None


def build_initial_state(tags: Iterable[Tag], creator: str, fallback: str = NO_TITLE) -> Dict[str, Any]:
    state = copy.deepcopy(INITIAL_STATE)
    state["name"] = find_title(tags) or fallback
    state["creator"] = creator
    return state


def init_state_json(tags: Iterable[Tag], creator: str, fallback: str = NO_TITLE) -> str:
    return json.dumps(build_initial_state(tags, creator, fallback))
