"""
Pool enumeration, discovery and tick/price math.
"""

from .discovery import DiscoveryConfig, PoolDiscoveryService
from .enumerator import PairFeeEnumerator, get_pool_call
from .errors import InvalidPair, InvalidRange, PoolError
from .pool_types import (
    FALLBACK_FEE_ORDER,
    FEE_TICK_SPACING,
    FEE_TIERS,
    PoolKey,
    PoolProbe,
    PoolState,
    canonical_pair,
)

__all__ = [
    "DiscoveryConfig",
    "PoolDiscoveryService",
    "PairFeeEnumerator",
    "get_pool_call",
    "InvalidPair",
    "InvalidRange",
    "PoolError",
    "FALLBACK_FEE_ORDER",
    "FEE_TICK_SPACING",
    "FEE_TIERS",
    "PoolKey",
    "PoolProbe",
    "PoolState",
    "canonical_pair",
]
