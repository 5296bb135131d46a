"""
Base configuration for the subscription client.

Values come from the process environment, optionally seeded from a .env
file in the working directory.
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from dotenv import load_dotenv
from eth_utils.address import is_address, to_checksum_address

load_dotenv()

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENVIRONMENTS = ("local", "test", "dev", "staging", "production")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class BaseConfig:
    """Shared environment settings and typed environment readers."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        """Configure root logging once for the process."""
        level = getattr(logging, self.LOG_LEVEL.upper(), None)
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    def _validate_config(self):
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read a raw environment variable.

        Args:
            key: Environment variable name
            default: Value used when the variable is unset
            required: Raise instead of returning None when unset

        Raises:
            ConfigError: If a required variable is missing
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def _get_env_as(key: str, convert: Callable[[str], T], default: Optional[T], kind: str) -> Optional[T]:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return convert(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be {kind}, got: {value}")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None) -> Optional[int]:
        """Read an environment variable as integer."""
        return BaseConfig._get_env_as(key, int, default, "an integer")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None) -> Optional[float]:
        """Read an environment variable as float."""
        return BaseConfig._get_env_as(key, float, default, "a float")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    @staticmethod
    def get_env_address(key: str, default: Optional[str] = None) -> Optional[str]:
        """Read an environment variable as checksum address."""
        def _convert(value: str) -> str:
            if not is_address(value):
                raise ValueError(value)
            return to_checksum_address(value)

        return BaseConfig._get_env_as(key, _convert, default, "an address")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            field: getattr(self, field)
            for field in self.__dataclass_fields__
            if not field.startswith('_')
        }
