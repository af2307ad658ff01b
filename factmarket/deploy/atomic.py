from __future__ import annotations

from factmarket.core.models import DeployAtomicFactMarketInput, DeployFactMarketInput, Result, ok
from factmarket.core.tags import get_permafacts_tags, get_smartweave_tags
from factmarket.deploy.clients import Clients
from factmarket.deploy.fact_market import deploy_fact_market


async def deploy_atomic_fact_market(inp: DeployAtomicFactMarketInput, clients: Clients) -> Result:
    """Deploy a fact market whose payload is the asserted content itself.

    No content is attached, so no ``Data-Source``/``Render-With`` tags are
    written. Failures propagate to the caller.
    """
    tags = (
        inp.tags
        + get_smartweave_tags(clients.fact_market_src, content_type=inp.content_type)
        + get_permafacts_tags()
    )
    tx_id = await deploy_fact_market(
        DeployFactMarketInput(
            tags=tags,
            owner=inp.owner,
            attach_to=None,
            rebut_tx=inp.rebut_tx,
            use=inp.use,
            data=inp.data,
            content_type=inp.content_type,
        ),
        clients,
    )
    return ok(tx_id)
