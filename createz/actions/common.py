"""
Helpers for building contract actions.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from web3.contract.async_contract import AsyncContractFunction

from ..config import get_config
from ..contracts.common import ContractHandle
from ..errors import InvalidParameter
from ..session import SessionContext
from .pipeline import LogFilter, TransactionAction

logger = logging.getLogger(__name__)

T = TypeVar("T")


def require_positive(value: Any, name: str = "amount") -> int:
    """
    Validate a funds-moving amount.

    Raises:
        InvalidParameter: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an integer, got: {value!r}")
    if value <= 0:
        raise InvalidParameter(f"{name} must be greater than zero, got: {value}")
    return value


def require_token_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidParameter(f"Invalid token id: {value!r}")
    return value


def contract_action(
    name: str,
    session: SessionContext,
    target: ContractHandle,
    function: AsyncContractFunction,
    log_filter: LogFilter,
    extract: Callable[[Mapping[str, Any]], T],
    gas_margin_percent: Optional[int] = None,
    tx_params: Optional[Dict[str, Any]] = None,
) -> TransactionAction[T]:
    """
    Wrap a bound contract function into a TransactionAction.

    The transaction is sent from the session account. With gas_margin_percent
    the gas is estimated first and the limit set to that share of the estimate.

    Raises:
        NoActiveAccount: If the session has no acting account
    """
    account = session.require_account()
    client_config = get_config().client

    async def _submit():
        params = {"from": account, **(tx_params or {})}
        if gas_margin_percent is not None:
            estimate = await function.estimate_gas(params)
            params = {**params, "gas": estimate * gas_margin_percent // 100}
            logger.debug(f"{name}: gas estimate {estimate}, limit {params['gas']}")
        return await function.transact(params)

    return TransactionAction(
        name=name,
        web3=session.web3,
        target=target,
        submit=_submit,
        log_filter=log_filter,
        extract=extract,
        confirmation_timeout=client_config.TX_CONFIRMATION_TIMEOUT,
    )
