"""
Query cache and transaction settings.
"""

from dataclasses import dataclass

from .base import BaseConfig, ConfigError


@dataclass
class ClientConfig(BaseConfig):
    """Tuning for the query client and the transaction pipeline."""

    # Query cache
    QUERY_MAX_RETRIES: int = BaseConfig.get_env_int("QUERY_MAX_RETRIES", 3)
    QUERY_RETRY_DELAY: float = BaseConfig.get_env_float("QUERY_RETRY_DELAY", 1.0)
    QUERY_STALE_TIME: float = BaseConfig.get_env_float("QUERY_STALE_TIME", 0.0)

    # Transactions
    TX_CONFIRMATION_TIMEOUT: float = BaseConfig.get_env_float("TX_CONFIRMATION_TIMEOUT", 120.0)
    CLAIM_GAS_MARGIN_PERCENT: int = BaseConfig.get_env_int("CLAIM_GAS_MARGIN_PERCENT", 110)

    def _validate_config(self):
        super()._validate_config()
        if self.QUERY_MAX_RETRIES < 1:
            raise ConfigError("QUERY_MAX_RETRIES must allow at least one attempt")
        if self.CLAIM_GAS_MARGIN_PERCENT < 100:
            raise ConfigError(
                f"CLAIM_GAS_MARGIN_PERCENT must be at least 100, got: {self.CLAIM_GAS_MARGIN_PERCENT}"
            )
