"""
Protocol-specific configuration for v3router.
"""

from dataclasses import dataclass, field
from typing import Tuple

from ..pools.pool_types import FEE_TICK_SPACING, FEE_TIERS
from .base import BaseConfig, ConfigError, ConfigMissing, env_int, env_str


def _fee_tiers_from_env() -> Tuple[int, ...]:
    values = BaseConfig.get_env_list("FEE_TIERS", [str(fee) for fee in FEE_TIERS])
    try:
        return tuple(int(value) for value in values)
    except ValueError:
        raise ConfigError(f"FEE_TIERS must be a comma-separated list of integers, got: {values}")


@dataclass
class ProtocolConfig(BaseConfig):
    """Contract addresses and scan limits for the V3 deployment."""

    # Core contracts (defaults are the Hemi deployment)
    UNI_FACTORY: str = env_str("UNI_FACTORY", "0x346239972d1fa486FC4a521031BC81bFB7D6e8a4")
    UNI_QUOTER_V2: str = env_str("UNI_QUOTER_V2", "0xcBa55304013187D49d4012F4d7e4B63a04405cd5")

    # Intermediary token for two-hop routes
    WRAPPED_NATIVE: str = env_str("WRAPPED_NATIVE", "0x4200000000000000000000000000000000000006")

    TOKEN_LIST_PATH: str = env_str("TOKEN_LIST_PATH", "")

    # Fee tiers checked by discovery and routing, in tie-breaking order
    FEE_TIERS: Tuple[int, ...] = field(default_factory=_fee_tiers_from_env)

    # Enumeration caps
    MAX_TOKENS: int = env_int("MAX_TOKENS", 120)
    MAX_PAIRS: int = env_int("MAX_PAIRS", 4000)
    FALLBACK_MAX_PAIRS: int = env_int("FALLBACK_MAX_PAIRS", 1500)

    # Probe chunk sizes
    EXISTENCE_CHUNK_SIZE: int = env_int("EXISTENCE_CHUNK_SIZE", 200)
    STATE_CHUNK_SIZE: int = env_int("STATE_CHUNK_SIZE", 150)
    STREAM_PAIR_CHUNK: int = env_int("STREAM_PAIR_CHUNK", 50)

    DEFAULT_SLIPPAGE_BPS: int = env_int("DEFAULT_SLIPPAGE_BPS", 50)

    def _validate_config(self):
        super()._validate_config()
        for name in ("MAX_TOKENS", "MAX_PAIRS", "FALLBACK_MAX_PAIRS",
                     "EXISTENCE_CHUNK_SIZE", "STATE_CHUNK_SIZE", "STREAM_PAIR_CHUNK"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        unknown = [fee for fee in self.FEE_TIERS if fee not in FEE_TICK_SPACING]
        if unknown or not self.FEE_TIERS:
            raise ConfigError(f"FEE_TIERS must be a non-empty subset of {FEE_TIERS}, got: {self.FEE_TIERS}")

    def require_factory(self) -> str:
        """Get the factory address, failing if it is not configured."""
        if not self.UNI_FACTORY:
            raise ConfigMissing("UNI_FACTORY is not configured")
        return self.UNI_FACTORY.lower()

    def require_quoter(self) -> str:
        """Get the QuoterV2 address, failing if it is not configured."""
        if not self.UNI_QUOTER_V2:
            raise ConfigMissing("UNI_QUOTER_V2 is not configured")
        return self.UNI_QUOTER_V2.lower()

    def require_token_list(self) -> str:
        """Get the token list path, failing if it is not configured."""
        if not self.TOKEN_LIST_PATH:
            raise ConfigMissing("TOKEN_LIST_PATH is not configured")
        return self.TOKEN_LIST_PATH
