"""
Chain-specific configuration for v3router.
"""

from dataclasses import dataclass
from typing import Optional

from .base import BaseConfig, ConfigMissing, env_float, env_int, env_str


@dataclass
class ChainConfig(BaseConfig):
    """Connection settings for the active chain."""

    CHAIN_ID: int = env_int("CHAIN_ID", 0)
    RPC_URL: str = env_str("RPC_URL", "")

    # Multicall3 preferred; a Multicall2 deployment exposing aggregate3 also works
    MULTICALL3_ADDRESS: str = env_str("MULTICALL3_ADDRESS", "")
    MULTICALL2_ADDRESS: str = env_str("MULTICALL2_ADDRESS", "")

    # RPC behaviour
    RPC_TIMEOUT: float = env_float("RPC_TIMEOUT", 30.0)
    RPC_MAX_RETRIES: int = env_int("RPC_MAX_RETRIES", 1)
    RPC_RETRY_DELAY: float = env_float("RPC_RETRY_DELAY", 1.0)

    @property
    def multicall_address(self) -> Optional[str]:
        """Address used for aggregated reads, or None to read call by call."""
        return self.MULTICALL3_ADDRESS or self.MULTICALL2_ADDRESS or None

    def require_rpc_url(self) -> str:
        """Get the RPC URL, failing if it is not configured."""
        if not self.RPC_URL:
            raise ConfigMissing("RPC_URL is not configured")
        if not self.RPC_URL.startswith(("http://", "https://")):
            raise ConfigMissing(f"RPC_URL must be an http(s) endpoint, got: {self.RPC_URL}")
        return self.RPC_URL

    def require_chain_id(self) -> int:
        """Get the chain ID, failing if it is unset."""
        if self.CHAIN_ID <= 0:
            raise ConfigMissing("CHAIN_ID is not configured")
        return self.CHAIN_ID
