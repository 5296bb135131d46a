"""
Subscription contract actions.

Each factory validates its parameters and returns a TransactionAction; no
network call happens before the action is run.
"""

import logging
from typing import Optional

from ..codec import validate_metadata_update
from ..config import get_config
from ..contracts.common import ContractHandle
from ..errors import InvalidParameter, MalformedMetadata
from ..session import SessionContext
from ..types import ZERO_ADDRESS, Address, normalize_address
from .common import contract_action, require_positive, require_token_id
from .pipeline import LogFilter, TransactionAction

logger = logging.getLogger(__name__)

MAX_MULTIPLIER = 2 ** 24 - 1


def mint(
    handle: ContractHandle,
    amount: int,
    session: SessionContext,
    multiplier: int = 100,
    message: str = "",
) -> TransactionAction[int]:
    """Mint a subscription funded with amount; completes with the new token id."""
    require_positive(amount)
    if not 0 < multiplier <= MAX_MULTIPLIER:
        raise InvalidParameter(f"Multiplier out of range: {multiplier}")
    account = session.require_account()

    return contract_action(
        "mint",
        session,
        handle,
        handle.contract.functions.mint(amount, multiplier, message),
        LogFilter("Transfer", {"from": ZERO_ADDRESS, "to": account}),
        lambda log: log["args"]["tokenId"],
    )


def deposit(
    handle: ContractHandle,
    token_id: int,
    amount: int,
    session: SessionContext,
    message: str = "",
) -> TransactionAction[int]:
    """Renew a subscription by depositing amount; completes with the added amount."""
    require_token_id(token_id)
    require_positive(amount)

    return contract_action(
        "deposit",
        session,
        handle,
        handle.contract.functions.renew(token_id, amount, message),
        LogFilter("SubscriptionRenewed", {"tokenId": token_id}),
        lambda log: log["args"]["addedAmount"],
    )


def withdraw(
    handle: ContractHandle,
    token_id: int,
    amount: int,
    session: SessionContext,
) -> TransactionAction[int]:
    """Withdraw unspent funds; completes with the withdrawn amount."""
    require_token_id(token_id)
    require_positive(amount)

    return contract_action(
        "withdraw",
        session,
        handle,
        handle.contract.functions.withdraw(token_id, amount),
        LogFilter("SubscriptionWithdrawn", {"tokenId": token_id}),
        lambda log: log["args"]["removedAmount"],
    )


def cancel(handle: ContractHandle, token_id: int, session: SessionContext) -> TransactionAction[int]:
    """Withdraw everything withdrawable; completes with the withdrawn amount."""
    require_token_id(token_id)

    return contract_action(
        "cancel",
        session,
        handle,
        handle.contract.functions.cancel(token_id),
        LogFilter("SubscriptionWithdrawn", {"tokenId": token_id}),
        lambda log: log["args"]["removedAmount"],
    )


def tip(
    handle: ContractHandle,
    token_id: int,
    amount: int,
    session: SessionContext,
    message: str = "",
) -> TransactionAction[int]:
    require_token_id(token_id)
    require_positive(amount)

    return contract_action(
        "tip",
        session,
        handle,
        handle.contract.functions.tip(token_id, amount, message),
        LogFilter("Tipped", {"tokenId": token_id}),
        lambda log: log["args"]["amount"],
    )


def claim(
    handle: ContractHandle,
    session: SessionContext,
    to: Optional[Address] = None,
) -> TransactionAction[int]:
    """
    Claim the owner's earned funds; completes with the claimed amount.

    The cost grows with the number of epochs processed, so gas is estimated
    up front and submitted with the configured margin (110% by default).
    """
    receiver = normalize_address(to) if to else session.require_account()

    return contract_action(
        "claim",
        session,
        handle,
        handle.contract.functions.claim(receiver),
        LogFilter("FundsClaimed"),
        lambda log: log["args"]["amount"],
        gas_margin_percent=get_config().client.CLAIM_GAS_MARGIN_PERCENT,
    )


def set_flags(handle: ContractHandle, flags: int, session: SessionContext) -> TransactionAction[int]:
    """Replace the feature flag bitfield; completes with the new flags."""
    if isinstance(flags, bool) or not isinstance(flags, int) or flags < 0:
        raise InvalidParameter(f"Flags must be a non-negative integer, got: {flags!r}")

    return contract_action(
        "set_flags",
        session,
        handle,
        handle.contract.functions.setFlags(flags),
        LogFilter("FlagsUpdated"),
        lambda log: log["args"]["flags"],
    )


def _metadata_action(
    name: str,
    field_name: str,
    setter: str,
    handle: ContractHandle,
    value: Optional[str],
    session: SessionContext,
) -> TransactionAction[str]:
    try:
        value = validate_metadata_update(field_name, value)
    except MalformedMetadata as e:
        raise InvalidParameter(str(e)) from e
    function = getattr(handle.contract.functions, setter)(value)
    return contract_action(
        name,
        session,
        handle,
        function,
        LogFilter("ContractURIUpdated"),
        lambda log: value,
    )


def update_description(
    handle: ContractHandle, description: Optional[str], session: SessionContext
) -> TransactionAction[str]:
    return _metadata_action("update_description", "description", "setDescription", handle, description, session)


def update_image(handle: ContractHandle, image: Optional[str], session: SessionContext) -> TransactionAction[str]:
    """Set the image URL; None or "" clears it."""
    return _metadata_action("update_image", "image", "setImage", handle, image, session)


def update_external_url(
    handle: ContractHandle, external_url: Optional[str], session: SessionContext
) -> TransactionAction[str]:
    """Set the external link; None or "" clears it."""
    return _metadata_action("update_external_url", "external_url", "setExternalUrl", handle, external_url, session)
