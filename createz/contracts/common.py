"""
Contract handles shared by readers and actions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from web3.contract import AsyncContract

from ..errors import ContractNotFound
from ..session import SessionContext
from ..types import Address, normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractHandle:
    """A connected contract together with its checksum address."""
    address: Address
    contract: AsyncContract


def connect(session: SessionContext, address: Address, abi: List[Dict[str, Any]]) -> ContractHandle:
    """Bind an ABI to an address without touching the network."""
    address = normalize_address(address)
    return ContractHandle(address, session.web3.eth.contract(address=address, abi=abi))


async def require_code(session: SessionContext, address: Address) -> None:
    """
    Ensure a contract is deployed at address.

    Raises:
        ContractNotFound: If the address holds no code
    """
    code = await session.web3.eth.get_code(address)
    if not code:
        logger.warning(f"No code at {address} on {session.chain.name}")
        raise ContractNotFound(address)
