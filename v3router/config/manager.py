"""
Configuration manager for v3router.

Combines the chain, protocol and cache settings behind one object. Reading
the environment never fails for missing endpoints; validate_configuration()
reports those, so commands that need no chain access (tick ranges) still run
without an RPC URL.
"""

import logging
from typing import Optional

from .base import BaseConfig, ConfigError, ConfigMissing
from .cache import CacheConfig
from .chains import ChainConfig
from .protocols import ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    All v3router settings.

    Args:
        environment: Override ENVIRONMENT (local, dev, staging, production, test)
    """

    def __init__(self, environment: Optional[str] = None):
        try:
            self.base = BaseConfig()
            if environment:
                self.base.ENVIRONMENT = environment
                self.base._validate_config()

            self.chains = ChainConfig()
            self.protocols = ProtocolConfig()
            self.cache = CacheConfig()
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

        logger.debug(f"Configuration loaded for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    def validate_configuration(self) -> bool:
        """
        Check that the RPC URL, chain id, factory and quoter are configured.

        Raises:
            ConfigMissing: If a required setting is absent
        """
        try:
            self.chains.require_rpc_url()
            self.chains.require_chain_id()
            self.protocols.require_factory()
            self.protocols.require_quoter()
        except ConfigMissing as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        if not self.chains.multicall_address:
            logger.warning("No multicall address configured; pool probes will use per-call reads")
        return True

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment}, chain_id={self.chains.CHAIN_ID})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Shared, validated ConfigManager.

    Args:
        environment: Override environment
        force_reload: Re-read the environment

    Raises:
        ConfigMissing: If a required setting is absent
    """
    global _config_manager

    if _config_manager is None or force_reload:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """Re-read the environment and replace the shared ConfigManager."""
    return get_config(environment=environment, force_reload=True)
