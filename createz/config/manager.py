"""
Process-wide configuration for the subscription client.

One ConfigManager bundles the environment, chain and client settings;
get_config() hands out the shared instance and reload_config() rebuilds it
after the environment changed (tests do this a lot).
"""

import logging
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError
from .chains import ChainConfig, ChainData
from .client import ClientConfig

logger = logging.getLogger(__name__)

RPC_SCHEMES = ("http://", "https://", "ws://", "wss://")


class ConfigManager:
    """Environment, chain and client settings loaded together."""

    def __init__(self, environment: Optional[str] = None):
        """
        Args:
            environment: Overrides ENVIRONMENT from the process environment
        """
        try:
            self.base = BaseConfig()
            if environment:
                self.base.ENVIRONMENT = environment
                self.base._validate_config()
            self.chains = ChainConfig()
            self.client = ClientConfig()
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Could not load client configuration: {e}")
            raise ConfigError(f"Could not load client configuration: {e}") from e

        logger.info(f"Loaded {self.environment} configuration, default chain {self.chains.DEFAULT_CHAIN}")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    def get_chain_data(self, chain_name: Optional[str] = None) -> ChainData:
        """Resolve chain parameters, failing with ConfigError for unknown chains."""
        try:
            return self.chains.get_chain_data(chain_name)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def validate_configuration(self) -> bool:
        """
        Check the chain registry is usable.

        Raises:
            ConfigError: Unsupported default chain or malformed RPC URL
        """
        chains = self.chains.supported_chains
        if self.chains.DEFAULT_CHAIN not in chains:
            raise ConfigError(f"Default chain not supported: {self.chains.DEFAULT_CHAIN}")

        for name, chain in chains.items():
            if not chain["rpc_url"].startswith(RPC_SCHEMES):
                raise ConfigError(f"Invalid RPC URL for {name}: {chain['rpc_url']}")
            if not chain["profile"]:
                logger.debug(f"No profile contract configured for {name}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "base": self.base.to_dict(),
            "chains": self.chains.to_dict(),
            "client": self.client.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment}, chain={self.chains.DEFAULT_CHAIN})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Shared configuration, loaded and validated on first use.

    Args:
        environment: Override environment
        force_reload: Rebuild from the current process environment
    """
    global _config_manager

    if _config_manager is None or force_reload:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    return get_config(environment=environment, force_reload=True)
