from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import tomllib


DEFAULT_GATEWAY_URL = "https://arweave.net"
DEFAULT_WARP_GATEWAY_URL = "https://gateway.warp.cc"
DEFAULT_FACT_MARKET_SRC = "ovWCp0xKuHtq-bADXbtiNqGZ6DQsU5kCO6YhEo8ZT4E"


@dataclass
class Config:
    arweave_gateway_url: str = DEFAULT_GATEWAY_URL
    arweave_timeout_s: float = 10.0
    wallet_type: str = "fake"
    wallet_keyfile: str = ""
    wallet_address: str = ""
    vouch_type: str = "fake"
    vouch_allow: List[str] = field(default_factory=list)
    bundlr_type: str = "fake"
    bundlr_node: str = "node2"
    warp_type: str = "fake"
    warp_gateway_url: str = DEFAULT_WARP_GATEWAY_URL
    warp_fact_market_src: str = DEFAULT_FACT_MARKET_SRC
    registry_type: str = "fake"
    logging_level: str = "INFO"
    logging_json: bool = True


def _deep_merge(a: dict, b: dict) -> dict:
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _parse(data: dict) -> Config:
    arw = data.get("arweave", {}) or {}
    wal = data.get("wallet", {}) or {}
    vch = data.get("vouch", {}) or {}
    bdl = data.get("bundlr", {}) or {}
    wrp = data.get("warp", {}) or {}
    reg = data.get("registry", {}) or {}
    log = data.get("logging", {}) or {}
    return Config(
        arweave_gateway_url=str(arw.get("gateway_url", DEFAULT_GATEWAY_URL)),
        arweave_timeout_s=float(arw.get("timeout_s", 10.0)),
        wallet_type=str(wal.get("type", "fake")),
        wallet_keyfile=str(wal.get("keyfile", "")),
        wallet_address=str(wal.get("address", "")),
        vouch_type=str(vch.get("type", "fake")),
        vouch_allow=[str(a) for a in (vch.get("allow", []) or [])],
        bundlr_type=str(bdl.get("type", "fake")),
        bundlr_node=str(bdl.get("node", "node2")),
        warp_type=str(wrp.get("type", "fake")),
        warp_gateway_url=str(wrp.get("gateway_url", DEFAULT_WARP_GATEWAY_URL)),
        warp_fact_market_src=str(wrp.get("fact_market_src", DEFAULT_FACT_MARKET_SRC)),
        registry_type=str(reg.get("type", "fake")),
        logging_level=str(log.get("level", "INFO")),
        logging_json=bool(log.get("json", True)),
    )


def _load_toml(p: Path) -> dict:
    with p.open("rb") as f:
        return tomllib.load(f)


def load_config(path: str | Path) -> Config:
    p = Path(path)
    data = _load_toml(p)
    # Optional secrets overlay from a sibling secrets.local.toml (gitignored by default)
    secrets_path = p.parent / "secrets.local.toml"
    if secrets_path.exists():
        secrets = _load_toml(secrets_path)
        # shallow merge only for [wallet]
        wal_overlay = secrets.get("wallet", {}) or {}
        if wal_overlay:
            base_wal = (data.get("wallet", {}) or {}).copy()
            base_wal.update(wal_overlay)
            data["wallet"] = base_wal
    return _parse(data)


def load_config_stack(paths: list[str | Path]) -> Config:
    merged: dict = {}
    for p in paths:
        pth = Path(p)
        if not pth.exists():
            continue
        merged = _deep_merge(merged, _load_toml(pth))
    return _parse(merged)
