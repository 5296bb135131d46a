"""
Transaction action pipeline.

An action submits one mutating call, waits for the receipt and extracts its
result from the event the call is expected to emit:

    IDLE -> SUBMITTING -> SUBMITTED -> CONFIRMING -> EXTRACTING -> COMPLETED

FAILED is reachable from every state after IDLE. Progress is reported as a
stream of at most two notifications: TxSubmitted, then TxCompleted. A failure
raises a TransactionError instead of the second notification.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from eth_utils.address import is_hex_address
from web3 import AsyncWeb3
from web3.logs import DISCARD

from ..errors import ConfirmationFailed, ExpectedLogNotFound, SubmissionRejected
from ..types import Hash, address_equals, to_hash
from ..contracts.common import ContractHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONFIRMATION_TIMEOUT = 120.0


class ActionState(Enum):
    """Lifecycle of a transaction action."""
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    CONFIRMING = "confirming"
    EXTRACTING = "extracting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class LogFilter:
    """Event an action expects, optionally narrowed by argument values."""
    event_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    def matches(self, log: Mapping[str, Any]) -> bool:
        args = log["args"]
        for name, expected in self.arguments.items():
            if name not in args:
                return False
            actual = args[name]
            if isinstance(expected, str) and is_hex_address(expected):
                if not address_equals(actual, expected):
                    return False
            elif actual != expected:
                return False
        return True


@dataclass(frozen=True)
class TxSubmitted:
    """The call was accepted; tx_hash identifies the pending transaction."""
    action: str
    tx_hash: Hash


@dataclass(frozen=True)
class TxCompleted(Generic[T]):
    """The transaction was confirmed and its result extracted."""
    action: str
    result: T
    tx_hash: Hash


ActionEvent = Union[TxSubmitted, TxCompleted]
ActionListener = Callable[[ActionEvent], Union[None, Awaitable[None]]]


class TransactionAction(Generic[T]):
    """
    One mutating call in flight.

    Instances are single use: once stream() has started the action cannot be
    replayed, a retry means building a new action.
    """

    def __init__(
        self,
        name: str,
        web3: AsyncWeb3,
        target: ContractHandle,
        submit: Callable[[], Awaitable[Any]],
        log_filter: LogFilter,
        extract: Callable[[Mapping[str, Any]], T],
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    ):
        """
        Args:
            name: Action name used in notifications and errors
            web3: Client used to wait for the receipt
            target: Contract whose event is expected
            submit: Coroutine function dispatching the call, returns the tx hash
            log_filter: Expected event and argument filter
            extract: Maps the matched decoded log to the action result
            confirmation_timeout: Seconds to wait for the receipt
        """
        self.name = name
        self.web3 = web3
        self.target = target
        self.log_filter = log_filter
        self.confirmation_timeout = confirmation_timeout
        self._submit = submit
        self._extract = extract
        self.state = ActionState.IDLE
        self.tx_hash: Optional[Hash] = None
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def _transition(self, state: ActionState) -> None:
        self.logger.debug(f"{self.name}: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, error_class, message: str) -> Exception:
        self._transition(ActionState.FAILED)
        self.logger.error(f"{self.name} failed: {message}", extra={"tx_hash": self.tx_hash})
        return error_class(message, action=self.name, tx_hash=self.tx_hash)

    def _find_log(self, receipt: Mapping[str, Any]) -> Mapping[str, Any]:
        event = getattr(self.target.contract.events, self.log_filter.event_name)()
        logs: List[Mapping[str, Any]] = event.process_receipt(receipt, errors=DISCARD)
        candidates = [
            log for log in logs
            if address_equals(log.get("address", self.target.address), self.target.address)
            and self.log_filter.matches(log)
        ]
        if not candidates:
            raise self._fail(
                ExpectedLogNotFound,
                f"No {self.log_filter.event_name} log matching {self.log_filter.arguments} in receipt",
            )
        if len(candidates) > 1:
            self.logger.warning(
                f"{len(candidates)} {self.log_filter.event_name} logs matched, using the first"
            )
        return candidates[0]

    async def stream(self) -> AsyncIterator[ActionEvent]:
        """
        Execute the action, yielding its notifications.

        Raises:
            SubmissionRejected: The call was not accepted, nothing was yielded
            ConfirmationFailed: The transaction timed out or reverted
            ExpectedLogNotFound: The receipt lacks the expected event
        """
        if self.state is not ActionState.IDLE:
            raise RuntimeError(f"Action {self.name} already started ({self.state.value})")

        self._transition(ActionState.SUBMITTING)
        try:
            self.tx_hash = to_hash(await self._submit())
        except Exception as e:
            raise self._fail(SubmissionRejected, f"Submission rejected: {e}") from e

        self._transition(ActionState.SUBMITTED)
        self.logger.info(f"{self.name} submitted: {self.tx_hash}")
        yield TxSubmitted(self.name, self.tx_hash)

        self._transition(ActionState.CONFIRMING)
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                self.tx_hash, timeout=self.confirmation_timeout
            )
        except Exception as e:
            raise self._fail(ConfirmationFailed, f"Confirmation failed: {e}") from e

        if receipt.get("status", 1) == 0:
            raise self._fail(ConfirmationFailed, "Transaction reverted")
        if receipt.get("transactionHash") is not None:
            self.tx_hash = to_hash(receipt["transactionHash"])

        self._transition(ActionState.EXTRACTING)
        log = self._find_log(receipt)
        try:
            result = self._extract(log)
        except (KeyError, TypeError, ValueError) as e:
            raise self._fail(
                ExpectedLogNotFound,
                f"{self.log_filter.event_name} log lacks the expected data: {e}",
            ) from e

        self._transition(ActionState.COMPLETED)
        self.logger.info(f"{self.name} completed: {self.tx_hash}")
        yield TxCompleted(self.name, result, self.tx_hash)

    async def run(self, listener: Optional[ActionListener] = None) -> TxCompleted[T]:
        """
        Execute the action to completion.

        Args:
            listener: Called with every notification, may be a coroutine function

        Returns:
            The TxCompleted notification
        """
        completed = None
        async for event in self.stream():
            if listener is not None:
                outcome = listener(event)
                if inspect.isawaitable(outcome):
                    await outcome
            if isinstance(event, TxCompleted):
                completed = event
        return completed
