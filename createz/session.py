"""
Session context threaded through readers, queries and actions.

The acting account is part of the session value, never ambient state.
Readers and disabled query nodes work without one; actions fail fast with
NoActiveAccount.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from .config import ChainData, ConfigManager, get_config
from .errors import NoActiveAccount
from .types import Address, optional_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Web3 client, chain parameters and the optional acting account."""
    web3: AsyncWeb3
    chain: ChainData
    account: Optional[Address] = None

    def __post_init__(self):
        object.__setattr__(self, "account", optional_address(self.account))

    @property
    def has_account(self) -> bool:
        return self.account is not None

    def require_account(self) -> Address:
        """Return the acting account or raise NoActiveAccount."""
        if self.account is None:
            raise NoActiveAccount()
        return self.account


def create_session(
    chain_name: Optional[str] = None,
    account: Optional[Address] = None,
    config: Optional[ConfigManager] = None,
) -> SessionContext:
    """
    Connect to a configured chain over HTTP.

    Args:
        chain_name: Chain to connect to, configured default when omitted
        account: Acting account; transactions are sent from it
        config: Configuration, the global instance when omitted

    Returns:
        SessionContext for the chain
    """
    config = config or get_config()
    chain = config.get_chain_data(chain_name)
    web3 = AsyncWeb3(AsyncHTTPProvider(chain.rpc_url))
    logger.info(f"Session created for {chain.name} ({chain.chain_id}) via {chain.rpc_url}")
    return SessionContext(web3=web3, chain=chain, account=account)
