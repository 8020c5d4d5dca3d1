"""
Configuration management for v3router.

Use get_config() to access all configuration settings.

Example:
    from v3router.config import get_config

    config = get_config()

    rpc_url = config.chains.require_rpc_url()
    factory = config.protocols.require_factory()
    ttl = config.cache.POOLS_CACHE_TTL
"""

from .base import BaseConfig, ConfigError, ConfigMissing
from .cache import CacheConfig
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .protocols import ProtocolConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ConfigMissing",
    "CacheConfig",
    "ChainConfig",
    "ProtocolConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
