"""
Tests for environment-driven configuration.
"""

import pytest

from ...pools.discovery import DiscoveryConfig
from ..base import ConfigError, ConfigMissing
from ..cache import CacheConfig
from ..chains import ChainConfig
from ..manager import ConfigManager, get_config, reload_config
from ..protocols import ProtocolConfig

REQUIRED_ENV = {
    "RPC_URL": "https://rpc.example.org",
    "CHAIN_ID": "43111",
    "UNI_FACTORY": "0x346239972d1fa486FC4a521031BC81bFB7D6e8a4",
    "UNI_QUOTER_V2": "0xcBa55304013187D49d4012F4d7e4B63a04405cd5",
}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    for key in ("MULTICALL3_ADDRESS", "MULTICALL2_ADDRESS", "REDIS_PASSWORD", "TOKEN_LIST_PATH", "FEE_TIERS"):
        monkeypatch.delenv(key, raising=False)
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


class TestChainConfig:
    """Test chain connection settings."""

    def test_reads_environment_at_creation(self, env):
        env.setenv("RPC_TIMEOUT", "12.5")
        config = ChainConfig()
        assert config.require_rpc_url() == "https://rpc.example.org"
        assert config.require_chain_id() == 43111
        assert config.RPC_TIMEOUT == 12.5

    def test_multicall_preference(self, env):
        env.setenv("MULTICALL2_ADDRESS", "0x2222222222222222222222222222222222222222")
        assert ChainConfig().multicall_address == "0x2222222222222222222222222222222222222222"

        env.setenv("MULTICALL3_ADDRESS", "0xcA11bde05977b3631167028862bE2a173976CA11")
        assert ChainConfig().multicall_address == "0xcA11bde05977b3631167028862bE2a173976CA11"

    def test_missing_or_bad_rpc_url(self, env):
        env.setenv("RPC_URL", "")
        with pytest.raises(ConfigMissing):
            ChainConfig().require_rpc_url()

        env.setenv("RPC_URL", "ws://rpc.example.org")
        with pytest.raises(ConfigMissing):
            ChainConfig().require_rpc_url()

    def test_bad_integer(self, env):
        env.setenv("CHAIN_ID", "hemi")
        with pytest.raises(ConfigError):
            ChainConfig()


class TestProtocolConfig:
    """Test contract addresses and scan limits."""

    def test_addresses_are_lowercased(self, env):
        config = ProtocolConfig()
        assert config.require_factory() == REQUIRED_ENV["UNI_FACTORY"].lower()
        assert config.require_quoter() == REQUIRED_ENV["UNI_QUOTER_V2"].lower()

    def test_non_positive_limits_rejected(self, env):
        env.setenv("MAX_PAIRS", "0")
        with pytest.raises(ConfigError):
            ProtocolConfig()

    def test_token_list_required(self, env):
        with pytest.raises(ConfigMissing):
            ProtocolConfig().require_token_list()

    def test_fee_tiers(self, env):
        assert ProtocolConfig().FEE_TIERS == (100, 500, 3000, 10000)

        env.setenv("FEE_TIERS", "3000, 500")
        assert ProtocolConfig().FEE_TIERS == (3000, 500)

        env.setenv("FEE_TIERS", "3000,2500")
        with pytest.raises(ConfigError):
            ProtocolConfig()


class TestCacheConfig:
    """Test Redis settings."""

    def test_password_only_when_set(self, env):
        assert "password" not in CacheConfig().get_redis_connection_kwargs()

        env.setenv("REDIS_PASSWORD", "  secret ")
        assert CacheConfig().get_redis_connection_kwargs()["password"] == "secret"

    def test_cache_enabled_flag(self, env):
        env.setenv("CACHE_ENABLED", "yes")
        assert CacheConfig().CACHE_ENABLED is True


class TestConfigManager:
    """Test the combined configuration."""

    def test_validate(self, env):
        assert ConfigManager().validate_configuration() is True

    def test_validate_missing_factory(self, env):
        env.setenv("UNI_FACTORY", "")
        manager = ConfigManager()
        with pytest.raises(ConfigMissing):
            manager.validate_configuration()

    def test_invalid_environment(self, env):
        env.setenv("ENVIRONMENT", "moon")
        with pytest.raises(ConfigError):
            ConfigManager()

    def test_discovery_config_from_manager(self, env):
        env.setenv("MAX_TOKENS", "10")
        env.setenv("STREAM_PAIR_CHUNK", "7")
        env.setenv("POOLS_CACHE_TTL", "60")
        env.setenv("FEE_TIERS", "500,3000")

        discovery = DiscoveryConfig.from_config(ConfigManager())

        assert discovery.max_tokens == 10
        assert discovery.stream_pair_chunk == 7
        assert discovery.pools_cache_ttl == 60
        assert discovery.cache_key_prefix == "pools:v2"
        assert discovery.fee_tiers == (500, 3000)

    def test_global_config_is_validated_and_cached(self, env):
        """Test that get_config validates once and reuses the instance."""
        first = reload_config()
        assert get_config() is first

        env.setenv("RPC_URL", "")
        with pytest.raises(ConfigMissing):
            reload_config()
