"""
ERC20 token readers.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..session import SessionContext
from ..types import Address, normalize_address
from .abis import ERC20_ABI
from .common import ContractHandle, connect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Erc20Data:
    address: Address
    name: str
    symbol: str
    decimals: int


def get_erc20_contract(address: Address, session: SessionContext) -> ContractHandle:
    logger.debug(f"Created ERC20 contract for {address}")
    return connect(session, address, ERC20_ABI)


async def get_erc20_data(handle: ContractHandle) -> Erc20Data:
    """Read name, symbol and decimals of a token."""
    logger.debug(f"Retrieving ERC20 data from {handle.address}")
    functions = handle.contract.functions
    name, symbol, decimals = await asyncio.gather(
        functions.name().call(),
        functions.symbol().call(),
        functions.decimals().call(),
    )
    return Erc20Data(address=handle.address, name=name, symbol=symbol, decimals=int(decimals))


async def get_balance(handle: ContractHandle, owner: Address) -> int:
    return await handle.contract.functions.balanceOf(normalize_address(owner)).call()


async def get_allowance(handle: ContractHandle, owner: Address, spender: Address) -> int:
    return await handle.contract.functions.allowance(
        normalize_address(owner), normalize_address(spender)
    ).call()
