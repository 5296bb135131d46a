"""
Client library for on-chain subscription contracts.

Reads subscription, ERC20, price feed and token-bound account state into
typed snapshots, exposes them through a reactive query graph and submits
mutating calls through the transaction action pipeline.

Example:
    from createz.session import create_session
    from createz.query import subscription_queries

    session = create_session("polygon", account="0x...")
    queries = subscription_queries("0x...", session)
    snapshot = await queries.subscription_data.result()
"""

__version__ = "0.3.0"
