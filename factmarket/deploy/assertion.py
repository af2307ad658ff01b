from __future__ import annotations

from factmarket.core.models import DeployAtomicFactMarketInput, Result
from factmarket.deploy.atomic import deploy_atomic_fact_market
from factmarket.deploy.clients import Clients


async def assert_fact(inp: DeployAtomicFactMarketInput, clients: Clients) -> Result:
    """Deploy a new assertion together with its fact market."""
    return await deploy_atomic_fact_market(inp, clients)
