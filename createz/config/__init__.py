"""
Configuration management for the subscription client.

Example:
    from createz.config import get_config

    config = get_config()

    chain = config.get_chain_data("polygon")
    rpc_url = chain.rpc_url
    retries = config.client.QUERY_MAX_RETRIES
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig, ChainContracts, ChainData
from .client import ClientConfig
from .manager import ConfigManager, get_config, reload_config

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ChainContracts",
    "ChainData",
    "ClientConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
