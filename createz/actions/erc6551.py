"""
ERC6551 token-bound account actions.
"""

from typing import Optional

from ..contracts.erc6551 import get_erc6551_registry
from ..session import SessionContext
from ..types import ZERO_32_BYTES, Address, normalize_address
from .common import contract_action, require_token_id
from .pipeline import LogFilter, TransactionAction


def create_erc6551_account(
    token_contract: Address,
    token_id: int,
    session: SessionContext,
    implementation: Optional[Address] = None,
) -> TransactionAction[Address]:
    """
    Deploy the token-bound account of an NFT through the registry.

    Completes with the checksummed account address.
    """
    require_token_id(token_id)
    token_contract = normalize_address(token_contract)
    implementation = normalize_address(
        implementation or session.chain.contracts.default_erc6551_implementation
    )
    registry = get_erc6551_registry(session)

    return contract_action(
        "create_erc6551_account",
        session,
        registry,
        registry.contract.functions.createAccount(
            implementation, ZERO_32_BYTES, session.chain.chain_id, token_contract, token_id
        ),
        LogFilter("ERC6551AccountCreated", {"tokenContract": token_contract, "tokenId": token_id}),
        lambda log: normalize_address(log["args"]["account"]),
    )
