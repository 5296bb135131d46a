"""
Exception hierarchy for subscription contract reads and transactions.

Readers and the codec raise these immediately. The query layer converts
them into node error state and the transaction pipeline raises the
TransactionError family after translating raw web3 faults.
"""

from typing import Any, Optional


class CreatezError(Exception):
    """Base exception for all client errors."""
    pass


class InvalidParameter(CreatezError):
    """Raised when a caller supplied argument violates a precondition."""
    pass


class NoActiveAccount(CreatezError):
    """Raised when an operation needs an acting account and none is connected."""

    def __init__(self, message: str = "No active account connected"):
        super().__init__(message)


class ContractNotFound(CreatezError):
    """Raised when no contract code is deployed at an address."""

    def __init__(self, address: str):
        super().__init__(f"No contract deployed at {address}")
        self.address = address


class MalformedMetadata(CreatezError):
    """
    Raised when an on-chain metadata document fails schema validation.

    The raw payload is kept for diagnostics.
    """

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class AttributeNotFound(CreatezError):
    """Raised when a requested attribute is absent from the attribute list."""

    def __init__(self, name: str):
        super().__init__(f"Attribute '{name}' not found")
        self.name = name


class AttributeTypeMismatch(CreatezError):
    """Raised when an attribute cannot be coerced to the requested type."""

    def __init__(self, name: str, expected: str, value: Any):
        super().__init__(
            f"Attribute '{name}' cannot be read as {expected}: {value!r}"
        )
        self.name = name
        self.expected = expected
        self.value = value


class TransactionError(CreatezError):
    """Base exception for transaction action failures."""

    def __init__(self, message: str, action: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.action = action
        self.tx_hash = tx_hash


class SubmissionRejected(TransactionError):
    """Raised when the node or signer rejects a mutating call."""
    pass


class ConfirmationFailed(TransactionError):
    """Raised when a submitted transaction times out or reverts."""
    pass


class ExpectedLogNotFound(TransactionError):
    """Raised when a confirmed receipt lacks the event the action expects."""
    pass
