"""
ERC6551 token-bound account readers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from web3.contract.async_contract import AsyncContractFunction
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..session import SessionContext
from ..types import ZERO_32_BYTES, Address, address_equals, normalize_address
from .abis import ERC6551_ACCOUNT_ABI, ERC6551_EXECUTABLE_ABI, ERC6551_REGISTRY_ABI
from .common import ContractHandle, connect

logger = logging.getLogger(__name__)

# bytes4(keccak256("isValidSigner(address,bytes)"))
VALID_SIGNER_MAGIC = bytes.fromhex("523e3260")

# execute() operation code for a plain call
OPERATION_CALL = 0


@dataclass(frozen=True)
class TokenBoundAccount:
    """A deployed token-bound account seen through both of its interfaces."""
    account: ContractHandle
    executable: ContractHandle

    @property
    def address(self) -> Address:
        return self.account.address


def get_erc6551_registry(session: SessionContext) -> ContractHandle:
    return connect(session, session.chain.contracts.erc6551_registry, ERC6551_REGISTRY_ABI)


async def find_erc6551_account(
    registry: ContractHandle,
    implementation: Address,
    salt: bytes,
    chain_id: int,
    token_contract: Address,
    token_id: int,
) -> Address:
    """Compute the counterfactual account address through the registry."""
    account = await registry.contract.functions.account(
        normalize_address(implementation), salt, chain_id, normalize_address(token_contract), token_id
    ).call()
    return normalize_address(account)


async def find_default_profile_account(session: SessionContext, token_id: int) -> Optional[Address]:
    """
    Address of the default token-bound account of a profile token.

    Returns None when the chain has no profile contract configured.
    """
    contracts = session.chain.contracts
    if not contracts.profile:
        logger.debug(f"No profile contract configured for {session.chain.name}")
        return None

    account = await find_erc6551_account(
        get_erc6551_registry(session),
        contracts.default_erc6551_implementation,
        ZERO_32_BYTES,
        session.chain.chain_id,
        contracts.profile,
        token_id,
    )
    logger.debug(f"Default ERC6551 account for token {token_id}: {account}")
    return account


async def get_erc6551_account(address: Address, session: SessionContext) -> Optional[TokenBoundAccount]:
    """Connect to a token-bound account, None if none is deployed at address."""
    account = connect(session, address, ERC6551_ACCOUNT_ABI)
    try:
        await account.contract.functions.state().call()
    except (BadFunctionCallOutput, ContractLogicError):
        logger.debug(f"Could not call state() on {account.address}, no account deployed")
        return None

    logger.debug(f"Created ERC6551 contracts for {account.address}")
    return TokenBoundAccount(account, connect(session, address, ERC6551_EXECUTABLE_ABI))


async def is_valid_signer(addr: Address, potential_account: Address, session: SessionContext) -> bool:
    """
    Whether addr may sign for potential_account.

    True when both are the same address or when potential_account is a
    token-bound account accepting addr as signer.
    """
    if address_equals(addr, potential_account):
        return True

    account = await get_erc6551_account(potential_account, session)
    if account is None:
        logger.debug(f"{potential_account} is not an ERC6551 account")
        return False

    result = await account.account.contract.functions.isValidSigner(
        normalize_address(addr), b""
    ).call()
    logger.debug(f"isValidSigner({addr}) on {potential_account}: {result!r}")
    return bytes(result) == VALID_SIGNER_MAGIC


def encode_execute(
    account: TokenBoundAccount,
    target: ContractHandle,
    function_name: str,
    args: Sequence[Any],
    value: int = 0,
) -> AsyncContractFunction:
    """
    Wrap a call to target so the token-bound account performs it.

    Returns the bound execute() function, ready to transact.
    """
    data = target.contract.encode_abi(function_name, args=list(args))
    logger.debug(f"ERC6551 execute {function_name} on {target.address} via {account.address}")
    return account.executable.contract.functions.execute(
        target.address, value, data, OPERATION_CALL
    )
