"""
Query sets for a subscription contract.

subscription_queries() wires the contract view:

    subscription_contract
    └── subscription_data
        ├── warnings
        └── erc20_contract
            ├── subscription_erc20_balance
            ├── erc20_allowance        (acting account only)
            ├── erc20_balance          (acting account only)
            └── erc20_data
                └── token_price

Keys are built with query_key so that graphs sharing a QueryClient share
cached results, e.g. an account's ERC20 balance. After a transaction the
caller refreshes the affected handles.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..codec import MetadataTransport
from ..contracts import (
    analyze_subscription_contract,
    create_subscription_contract,
    find_price,
    get_allowance,
    get_balance,
    get_contract_data,
    get_erc20_contract,
    get_erc20_data,
    get_subscription_data,
)
from ..session import SessionContext
from ..types import Address, normalize_address
from .client import QueryClient, query_key
from .graph import QueryGraph, QueryHandle, QueryNode

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionQueries:
    graph: QueryGraph
    subscription_contract: QueryHandle
    subscription_data: QueryHandle
    erc20_contract: QueryHandle
    subscription_erc20_balance: QueryHandle
    erc20_data: QueryHandle
    erc20_allowance: QueryHandle
    erc20_balance: QueryHandle
    token_price: QueryHandle
    warnings: QueryHandle


@dataclass
class SubscriptionTokenQueries:
    graph: QueryGraph
    subscription_contract: QueryHandle
    token_data: QueryHandle


def _contract_node(address: Address, session: SessionContext) -> QueryNode:
    chain_id = session.chain.chain_id

    async def _fetch(upstream):
        return await create_subscription_contract(address, session)

    return QueryNode(
        name="subscription_contract",
        key=lambda upstream: query_key("subscription_contract", chain_id, address),
        fetch=_fetch,
    )


def subscription_queries(
    address: Address,
    session: SessionContext,
    client: Optional[QueryClient] = None,
    transport: Optional[MetadataTransport] = None,
) -> SubscriptionQueries:
    """
    Build the query graph for one subscription contract.

    Args:
        address: Subscription contract address
        session: Session; the account nodes stay idle without an account
        client: Shared cache, a new one when omitted
        transport: Metadata transport for the contract document

    Returns:
        SubscriptionQueries holding the graph and a handle per node
    """
    address = normalize_address(address)
    chain_id = session.chain.chain_id
    account = session.account
    graph = QueryGraph(client)

    def _token(upstream) -> Address:
        return upstream["subscription_data"].data.token

    def _erc20(upstream):
        return upstream["erc20_contract"].data

    def _has_account(upstream) -> bool:
        return session.has_account

    graph.add_node(_contract_node(address, session))

    async def _fetch_data(upstream):
        return await get_contract_data(upstream["subscription_contract"].data, transport)

    graph.add_node(QueryNode(
        name="subscription_data",
        key=lambda upstream: query_key("subscription_data", chain_id, address),
        fetch=_fetch_data,
        depends_on=["subscription_contract"],
    ))

    async def _fetch_warnings(upstream):
        return await analyze_subscription_contract(upstream["subscription_data"].data)

    graph.add_node(QueryNode(
        name="warnings",
        key=lambda upstream: query_key("subscription_warnings", chain_id, address),
        fetch=_fetch_warnings,
        depends_on=["subscription_data"],
    ))

    async def _fetch_erc20_contract(upstream):
        return get_erc20_contract(_token(upstream), session)

    graph.add_node(QueryNode(
        name="erc20_contract",
        key=lambda upstream: query_key("erc20_contract", chain_id, _token(upstream)),
        fetch=_fetch_erc20_contract,
        depends_on=["subscription_data"],
    ))

    async def _fetch_contract_balance(upstream):
        return await get_balance(_erc20(upstream), address)

    graph.add_node(QueryNode(
        name="subscription_erc20_balance",
        key=lambda upstream: query_key(
            "erc20_balance", chain_id, _erc20(upstream).address, address
        ),
        fetch=_fetch_contract_balance,
        depends_on=["erc20_contract"],
    ))

    async def _fetch_allowance(upstream):
        return await get_allowance(_erc20(upstream), account, address)

    graph.add_node(QueryNode(
        name="erc20_allowance",
        key=lambda upstream: query_key(
            "erc20_allowance", chain_id, _erc20(upstream).address, account, address
        ),
        fetch=_fetch_allowance,
        depends_on=["erc20_contract"],
        enabled=_has_account,
    ))

    async def _fetch_account_balance(upstream):
        return await get_balance(_erc20(upstream), account)

    graph.add_node(QueryNode(
        name="erc20_balance",
        key=lambda upstream: query_key(
            "erc20_balance", chain_id, _erc20(upstream).address, account
        ),
        fetch=_fetch_account_balance,
        depends_on=["erc20_contract"],
        enabled=_has_account,
    ))

    async def _fetch_erc20_data(upstream):
        return await get_erc20_data(_erc20(upstream))

    graph.add_node(QueryNode(
        name="erc20_data",
        key=lambda upstream: query_key("erc20_data", chain_id, _erc20(upstream).address),
        fetch=_fetch_erc20_data,
        depends_on=["erc20_contract"],
    ))

    async def _fetch_price(upstream):
        return await find_price(
            upstream["erc20_data"].data.address, session.chain.price_feeds, session
        )

    graph.add_node(QueryNode(
        name="token_price",
        key=lambda upstream: query_key("token_price", chain_id, upstream["erc20_data"].data.address),
        fetch=_fetch_price,
        depends_on=["erc20_data"],
    ))

    logger.debug(f"Built subscription queries for {address} on chain {chain_id}")
    return SubscriptionQueries(
        graph=graph,
        **{name: graph.handle(name) for name in graph.nodes},
    )


def subscription_token_queries(
    address: Address,
    token_id: int,
    session: SessionContext,
    client: Optional[QueryClient] = None,
    transport: Optional[MetadataTransport] = None,
) -> SubscriptionTokenQueries:
    """Build the query graph for one subscription token."""
    address = normalize_address(address)
    chain_id = session.chain.chain_id
    graph = QueryGraph(client)
    graph.add_node(_contract_node(address, session))

    async def _fetch_token(upstream):
        return await get_subscription_data(upstream["subscription_contract"].data, token_id, transport)

    graph.add_node(QueryNode(
        name="token_data",
        key=lambda upstream: query_key("subscription_token_data", chain_id, address, token_id),
        fetch=_fetch_token,
        depends_on=["subscription_contract"],
    ))

    return SubscriptionTokenQueries(
        graph=graph,
        subscription_contract=graph.handle("subscription_contract"),
        token_data=graph.handle("token_data"),
    )
