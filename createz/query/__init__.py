"""
Reactive, cached queries.

Example:
    from createz.query import subscription_queries

    queries = subscription_queries(address, session)
    snapshot = await queries.subscription_data.result()

    # after a deposit went through
    queries.erc20_balance.refresh()
    queries.subscription_erc20_balance.refresh()
    await queries.graph.settle()
"""

from .client import QueryClient, QueryKey, QueryState, QueryStatus, query_key
from .graph import DependencyError, QueryGraph, QueryHandle, QueryNode, has_data
from .retry import ErrorHandler, retry_operation
from .subscriptions import (
    SubscriptionQueries,
    SubscriptionTokenQueries,
    subscription_queries,
    subscription_token_queries,
)

__all__ = [
    "DependencyError",
    "ErrorHandler",
    "QueryClient",
    "QueryGraph",
    "QueryHandle",
    "QueryKey",
    "QueryNode",
    "QueryState",
    "QueryStatus",
    "SubscriptionQueries",
    "SubscriptionTokenQueries",
    "has_data",
    "query_key",
    "retry_operation",
    "subscription_queries",
    "subscription_token_queries",
]
