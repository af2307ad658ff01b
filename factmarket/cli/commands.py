from __future__ import annotations

import json as _json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from factmarket.config import Config, load_config
from factmarket.core.models import AttachFactMarketInput, DeployAtomicFactMarketInput, Result, Tag
from factmarket.deploy.assertion import assert_fact
from factmarket.deploy.clients import Clients, build_clients
from factmarket.deploy.fact_market import attach_fact_market, collect_attach_tags
from factmarket.observability.logging import setup_logging
from factmarket.observability.metrics import format_counters


def _load_cfg(config_path: Optional[str]) -> Config:
    cfg = load_config(config_path) if config_path else Config()
    setup_logging(level=cfg.logging_level, json_output=cfg.logging_json)
    return cfg


def _print_metrics() -> None:
    for line in format_counters():
        print(line, file=sys.stderr)


async def _run_with_clients(cfg: Config, clients: Optional[Clients], fn) -> Any:
    owned = clients is None
    clients = clients or build_clients(cfg)
    try:
        return await fn(clients)
    finally:
        if owned:
            await clients.aclose()


async def cmd_attach_async(
    tx: str,
    wallet: str,
    rebut_tx: Optional[str] = None,
    use: Optional[str] = None,
    config_path: Optional[str] = None,
    verbose: bool = False,
    clients: Optional[Clients] = None,
) -> Result:
    """Attach a fact market to ``tx`` and print the result JSON."""
    cfg = _load_cfg(config_path)
    inp = AttachFactMarketInput(tx=tx, wallet=wallet, rebut_tx=rebut_tx, use=use)
    res = await _run_with_clients(cfg, clients, lambda c: attach_fact_market(inp, c))
    print(_json.dumps(res))
    if verbose:
        _print_metrics()
    return res


async def cmd_assert_async(
    file: str,
    wallet: str,
    title: str,
    content_type: str = "text/plain",
    description: Optional[str] = None,
    topics: Optional[List[str]] = None,
    rebut_tx: Optional[str] = None,
    use: Optional[str] = None,
    config_path: Optional[str] = None,
    clients: Optional[Clients] = None,
) -> Result:
    """Deploy an assertion from a local file and print the result JSON.

    Deployment errors propagate; only ``attach`` turns them into ``{"error": ...}``.
    """
    cfg = _load_cfg(config_path)
    tags = [Tag("Title", title), Tag("Type", "fact")]
    if description:
        tags.append(Tag("Description", description))
    for topic in topics or []:
        tags.append(Tag(f"Topic:{topic}", topic))
    data = Path(file).read_text(encoding="utf-8")
    inp = DeployAtomicFactMarketInput(
        tags=tuple(tags),
        data=data,
        owner=wallet,
        content_type=content_type,
        rebut_tx=rebut_tx,
        use=use,
    )
    res = await _run_with_clients(cfg, clients, lambda c: assert_fact(inp, c))
    print(_json.dumps(res))
    return res


async def cmd_tags_async(tx: str, config_path: Optional[str] = None, clients: Optional[Clients] = None) -> List[Dict[str, str]]:
    """Print the merged ANS-110, SmartWeave and Permafacts tags ``attach`` hands to the dispatcher for ``tx``.

    Per-backend protocol tags and ``Init-State`` are added later by the strategy.
    """
    cfg = _load_cfg(config_path)
    tags = await _run_with_clients(cfg, clients, lambda c: collect_attach_tags(tx, c))
    out = [t.as_dict() for t in tags]
    print(_json.dumps(out, indent=2))
    return out
