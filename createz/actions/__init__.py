"""
Transaction actions against subscription, ERC20 and ERC6551 contracts.

Example:
    action = deposit(handle, token_id, amount, session)
    async for event in action.stream():
        if isinstance(event, TxSubmitted):
            print("pending", event.tx_hash)
        else:
            print("renewed with", event.result)
"""

from .erc20 import approve
from .erc6551 import create_erc6551_account
from .pipeline import (
    ActionEvent,
    ActionState,
    LogFilter,
    TransactionAction,
    TxCompleted,
    TxSubmitted,
)
from .subscription import (
    cancel,
    claim,
    deposit,
    mint,
    set_flags,
    tip,
    update_description,
    update_external_url,
    update_image,
    withdraw,
)

__all__ = [
    "ActionEvent",
    "ActionState",
    "LogFilter",
    "TransactionAction",
    "TxCompleted",
    "TxSubmitted",
    "approve",
    "cancel",
    "claim",
    "create_erc6551_account",
    "deposit",
    "mint",
    "set_flags",
    "tip",
    "update_description",
    "update_external_url",
    "update_image",
    "withdraw",
]
