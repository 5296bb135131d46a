"""
Tests for configuration loading.
"""

import pytest

from createz.config import (
    BaseConfig,
    ChainConfig,
    ClientConfig,
    ConfigError,
    ConfigManager,
    get_config,
    reload_config,
)
from createz.config.chains import ERC6551_REGISTRY


class TestBaseConfig:
    """Test environment readers."""

    def test_get_env_int(self, monkeypatch):
        monkeypatch.setenv("CREATEZ_TEST_INT", "42")

        assert BaseConfig.get_env_int("CREATEZ_TEST_INT", 1) == 42
        assert BaseConfig.get_env_int("CREATEZ_TEST_UNSET", 7) == 7

    def test_get_env_int_invalid(self, monkeypatch):
        monkeypatch.setenv("CREATEZ_TEST_INT", "forty")

        with pytest.raises(ConfigError):
            BaseConfig.get_env_int("CREATEZ_TEST_INT")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("off", False)])
    def test_get_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("CREATEZ_TEST_BOOL", raw)

        assert BaseConfig.get_env_bool("CREATEZ_TEST_BOOL") is expected

    def test_get_env_required(self, monkeypatch):
        monkeypatch.delenv("CREATEZ_TEST_REQUIRED", raising=False)

        with pytest.raises(ConfigError):
            BaseConfig.get_env("CREATEZ_TEST_REQUIRED", required=True)

    def test_get_env_address_checksums(self, monkeypatch):
        monkeypatch.setenv("CREATEZ_TEST_ADDRESS", ERC6551_REGISTRY.lower())

        assert BaseConfig.get_env_address("CREATEZ_TEST_ADDRESS") == ERC6551_REGISTRY

    def test_get_env_address_invalid(self, monkeypatch):
        monkeypatch.setenv("CREATEZ_TEST_ADDRESS", "0x1234")

        with pytest.raises(ConfigError):
            BaseConfig.get_env_address("CREATEZ_TEST_ADDRESS")

    def test_invalid_environment(self):
        with pytest.raises(ConfigError):
            BaseConfig(ENVIRONMENT="moon")

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            BaseConfig(LOG_LEVEL="LOUD")


class TestChainConfig:
    """Test chain parameter resolution."""

    def test_chain_data(self):
        config = ChainConfig()

        chain = config.get_chain_data("polygon")

        assert chain.chain_id == 137
        assert chain.contracts.erc6551_registry == ERC6551_REGISTRY
        assert "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270" in chain.price_feeds

    def test_default_chain(self):
        config = ChainConfig(DEFAULT_CHAIN="base")

        assert config.get_chain_data().chain_id == 8453

    def test_unsupported_chain(self):
        with pytest.raises(ValueError):
            ChainConfig().get_chain_data("solana")


class TestClientConfig:
    """Test client tuning validation."""

    def test_defaults(self):
        config = ClientConfig()

        assert config.QUERY_MAX_RETRIES >= 1
        assert config.CLAIM_GAS_MARGIN_PERCENT >= 100

    def test_gas_margin_below_estimate(self):
        with pytest.raises(ConfigError):
            ClientConfig(CLAIM_GAS_MARGIN_PERCENT=90)

    def test_no_attempts(self):
        with pytest.raises(ConfigError):
            ClientConfig(QUERY_MAX_RETRIES=0)


class TestConfigManager:
    """Test the combined configuration."""

    def test_environment_override(self):
        manager = ConfigManager(environment="test")

        assert manager.environment == "test"
        assert manager.validate_configuration() is True
        assert set(manager.to_dict()) == {"environment", "base", "chains", "client"}

    def test_unknown_chain_is_config_error(self):
        with pytest.raises(ConfigError):
            ConfigManager().get_chain_data("solana")

    def test_global_instance(self):
        assert get_config() is get_config()
        assert reload_config() is get_config()
