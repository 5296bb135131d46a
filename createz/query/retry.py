"""
Retry policy for query fetches.

Only transport level failures are retried. Domain errors (malformed
metadata, missing contracts, invalid parameters) are deterministic and fail
the query on the first attempt.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from web3.exceptions import ContractLogicError

from ..errors import CreatezError

logger = logging.getLogger(__name__)

MAX_RETRY_DELAY = 60.0

# Substrings of RPC provider messages, matched lowercased
RATE_LIMIT_MARKERS = ("rate limit", "too many requests", "429", "request limit", "capacity exceeded")
NETWORK_MARKERS = ("connection", "timeout", "timed out", "network", "dns", "503", "502", "header not found")
CONTRACT_MARKERS = ("revert", "execution reverted", "out of gas", "invalid opcode")


class ErrorHandler:
    """
    Classifies fetch errors and decides on retries and backoff.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Map a fetch failure to the category that decides retries.

        Returns:
            One of domain, contract, rate_limit, network, unknown
        """
        if isinstance(error, CreatezError):
            return 'domain'
        if isinstance(error, ContractLogicError):
            return 'contract'
        if isinstance(error, (asyncio.TimeoutError, ConnectionError)):
            return 'network'

        message = str(error).lower()
        for category, markers in (
            ('rate_limit', RATE_LIMIT_MARKERS),
            ('network', NETWORK_MARKERS),
            ('contract', CONTRACT_MARKERS),
        ):
            if any(marker in message for marker in markers):
                return category

        return 'unknown'

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Determine if an error should trigger another attempt.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            max_retries: Total attempts allowed
        """
        if attempt + 1 >= max_retries:
            return False
        return self.classify_error(error) in ('network', 'rate_limit', 'unknown')

    def get_retry_delay(self, error: Exception, attempt: int, base_delay: float = 1.0) -> float:
        """Exponential backoff, doubled for rate limits, capped at 60 seconds."""
        delay = base_delay * 2 ** attempt
        if self.classify_error(error) == 'rate_limit':
            delay *= 2
        return min(delay, MAX_RETRY_DELAY)

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """Deterministic failures log as errors, transient ones as warnings."""
        category = self.classify_error(error)
        extra = {"error_type": type(error).__name__, "error_category": category, **context}

        if category in ('domain', 'contract'):
            self.logger.error(f"Query failed: {error}", extra=extra)
        elif category == 'rate_limit':
            self.logger.info(f"RPC rate limited: {error}", extra=extra)
        else:
            self.logger.warning(f"Query attempt failed: {error}", extra=extra)


async def retry_operation(
    operation: Callable[[], Awaitable[Any]],
    max_retries: int,
    retry_delay: float,
    error_handler: ErrorHandler,
    context: Optional[Dict[str, Any]] = None,
) -> Any:
    """Run operation, retrying classified transient failures with backoff."""
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            error_handler.log_error(
                e, {"attempt": attempt + 1, "max_retries": max_retries, **(context or {})}
            )
            if not error_handler.should_retry(e, attempt, max_retries):
                raise

            delay = error_handler.get_retry_delay(e, attempt, retry_delay)
            error_handler.logger.info(
                f"Retrying in {delay}s... (attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(delay)
            attempt += 1
