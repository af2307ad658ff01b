from __future__ import annotations

import logging

from factmarket.adapters.arweave.wallet import APP_NAME, PERMISSIONS
from factmarket.adapters.warp.warp import WALLET_SELECTOR, ContractDeploy
from factmarket.core.errors import EmptySubmissionResult, MissingWallet, NonVouchedOwner
from factmarket.core.models import (
    AttachFactMarketInput,
    Backend,
    DeployFactMarketInput,
    Result,
    Tag,
    Tags,
    err,
    ok,
)
from factmarket.core.tags import (
    NO_TITLE,
    NO_TITLE_WALLET,
    fact_protocol_tags,
    get_ans110_tags,
    get_permafacts_tags,
    get_smartweave_tags,
    init_state_json,
)
from factmarket.deploy.clients import Clients
from factmarket.observability.metrics import record_attach_error, record_deploy


logger = logging.getLogger(__name__)


async def deploy_fact_market(inp: DeployFactMarketInput, clients: Clients) -> str:
    backend = Backend.parse(inp.use)
    if backend is Backend.ARWEAVE_WALLET:
        tx_id = await deploy_with_arweave_wallet(inp, clients)
    elif backend is Backend.WARP:
        tx_id = await deploy_with_warp(inp, clients)
    elif backend is Backend.BUNDLR:
        tx_id = await deploy_with_bundlr(inp, clients)
    else:  # pragma: no cover - Backend.parse rejects everything else
        raise AssertionError(backend)
    record_deploy(backend.value)
    return tx_id


def _submission_tags(inp: DeployFactMarketInput, render_first: bool = False) -> Tags:
    return inp.tags + fact_protocol_tags(inp.attach_to, inp.rebut_tx, render_first=render_first)


async def deploy_with_bundlr(inp: DeployFactMarketInput, clients: Clients) -> str:
    tags = _submission_tags(inp) + (Tag("Init-State", init_state_json(inp.tags, inp.owner, NO_TITLE)),)
    result = await clients.bundlr.upload(inp.data, tags)
    if not result.id:
        raise EmptySubmissionResult("Failed to deploy assertion.")
    await clients.registry.register(result.id)
    return result.id


async def deploy_with_warp(inp: DeployFactMarketInput, clients: Clients) -> str:
    contract = ContractDeploy(
        init_state=init_state_json(inp.tags, inp.owner, NO_TITLE),
        src_tx_id=clients.fact_market_src,
        wallet=WALLET_SELECTOR,
        data={"Content-Type": inp.content_type, "body": inp.data},
        tags=list(_submission_tags(inp)),
    )
    result = await clients.warp.deploy_from_source_tx(contract, False)
    if not result.contract_tx_id:
        raise EmptySubmissionResult("Failed to deploy assertion.")
    # not registered, unlike the bundlr and wallet paths
    return result.contract_tx_id


async def deploy_with_arweave_wallet(inp: DeployFactMarketInput, clients: Clients) -> str:
    if not await clients.vouch.is_vouched(inp.owner):
        raise NonVouchedOwner("non-vouched")
    tx = clients.gateway.create_transaction(inp.data)
    for t in _submission_tags(inp, render_first=True):
        tx.add_tag(t.name, t.value)

    wallet = clients.wallet
    if wallet is None:
        raise MissingWallet("Unable to find arweave wallet.")
    await wallet.disconnect()
    await wallet.connect(list(PERMISSIONS), {"name": APP_NAME})
    addr = await wallet.get_active_address()

    # creator is the connected signer, which may differ from inp.owner
    tx.add_tag("Init-State", init_state_json(inp.tags, addr, NO_TITLE_WALLET))

    tx_id = await wallet.dispatch(tx)
    if not tx_id:
        raise EmptySubmissionResult("Failed to dispatch transaction.")
    logger.info("Transaction id: %s", tx_id, extra={"tx_id": tx_id})
    return await clients.registry.register(tx_id)


async def collect_attach_tags(tx_id: str, clients: Clients) -> Tags:
    """Merge the target's ANS-110 tags with the SmartWeave and Permafacts tags."""
    transaction = await clients.gateway.get_tx(tx_id)
    ans110_tags = get_ans110_tags(transaction.tags if transaction else None)
    return ans110_tags + get_smartweave_tags(clients.fact_market_src) + get_permafacts_tags()


async def attach_fact_market(inp: AttachFactMarketInput, clients: Clients) -> Result:
    """Deploy a fact market attached to an existing transaction.

    Never raises for deployment failures: the outcome is either ``{"tx": id}``
    or ``{"error": message}``.
    """
    try:
        tags = await collect_attach_tags(inp.tx, clients)
        tx_id = await deploy_fact_market(
            DeployFactMarketInput(
                tags=tags,
                owner=inp.wallet,
                attach_to=inp.tx,
                rebut_tx=inp.rebut_tx,
                use=inp.use,
            ),
            clients,
        )
        return ok(tx_id)
    except Exception as e:  # noqa: BLE001
        record_attach_error()
        logger.warning("attach fact market failed for %s: %s", inp.tx, e, exc_info=True)
        return err(str(e))
