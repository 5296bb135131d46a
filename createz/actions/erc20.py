"""
ERC20 actions.
"""

from ..contracts.common import ContractHandle
from ..session import SessionContext
from ..types import Address, normalize_address
from .common import contract_action, require_positive
from .pipeline import LogFilter, TransactionAction


def approve(
    token: ContractHandle,
    spender: Address,
    amount: int,
    session: SessionContext,
) -> TransactionAction[int]:
    """Allow spender to move amount of token; completes with the approved amount."""
    require_positive(amount)
    spender = normalize_address(spender)
    owner = session.require_account()

    return contract_action(
        "approve",
        session,
        token,
        token.contract.functions.approve(spender, amount),
        LogFilter("Approval", {"owner": owner, "spender": spender}),
        lambda log: log["args"]["value"],
    )
