from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from factmarket.adapters.arweave.gateway_http import GatewayHttpClient
from factmarket.adapters.arweave.vouch import build_vouch
from factmarket.adapters.arweave.wallet import build_wallet
from factmarket.adapters.bundlr.bundlr import build_bundlr
from factmarket.adapters.warp.warp import build_registry, build_warp
from factmarket.config import Config, DEFAULT_FACT_MARKET_SRC


@dataclass
class Clients:
    """The external collaborators one deployment talks to."""

    gateway: Any
    vouch: Any
    wallet: Optional[Any]
    bundlr: Any
    warp: Any
    registry: Any
    fact_market_src: str = DEFAULT_FACT_MARKET_SRC

    async def aclose(self) -> None:
        for c in (self.gateway, self.wallet, self.registry):
            close = getattr(c, "aclose", None)
            if close is not None:
                await close()


def build_clients(cfg: Config, **overrides: Any) -> Clients:
    """Build clients from config; keyword overrides replace individual collaborators."""
    gateway = overrides.get("gateway") or GatewayHttpClient(cfg.arweave_gateway_url, timeout_s=cfg.arweave_timeout_s)
    if "vouch" in overrides:
        vouch = overrides["vouch"]
    else:
        vouch = build_vouch(cfg.vouch_type, allow=cfg.vouch_allow, gateway=gateway)
    if "wallet" in overrides:
        wallet = overrides["wallet"]
    else:
        wallet = build_wallet(
            cfg.wallet_type,
            keyfile=cfg.wallet_keyfile,
            address=cfg.wallet_address,
            gateway_url=cfg.arweave_gateway_url,
            timeout_s=cfg.arweave_timeout_s,
        )
    bundlr = overrides.get("bundlr") or build_bundlr(cfg.bundlr_type, client=overrides.get("bundlr_client"))
    warp = overrides.get("warp") or build_warp(cfg.warp_type, client=overrides.get("warp_client"))
    registry = overrides.get("registry") or build_registry(
        cfg.registry_type,
        base_url=cfg.warp_gateway_url,
        bundlr_node=cfg.bundlr_node,
        timeout_s=cfg.arweave_timeout_s,
    )
    return Clients(
        gateway=gateway,
        vouch=vouch,
        wallet=wallet,
        bundlr=bundlr,
        warp=warp,
        registry=registry,
        fact_market_src=cfg.warp_fact_market_src,
    )
