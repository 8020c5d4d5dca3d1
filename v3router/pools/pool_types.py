"""
Core types for pool discovery.

Domain models used across the pools and routing modules for representing
fee tiers, canonical pool keys and probed pool state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..chain.types import LogicalCall
from .errors import InvalidPair

FEE_TIERS: Tuple[int, ...] = (100, 500, 3000, 10000)

# Factory defaults; an individual pool reports its own spacing via tickSpacing()
FEE_TICK_SPACING: Dict[int, int] = {100: 1, 500: 10, 3000: 60, 10000: 200}

# Most liquid tiers first, used by the reduced fallback scan
FALLBACK_FEE_ORDER: Tuple[int, ...] = (3000, 500, 100, 10000)


def canonical_pair(token_a: str, token_b: str) -> Tuple[str, str]:
    """
    Order two token addresses the way the factory keys pools.

    Args:
        token_a: Token address, any case
        token_b: Token address, any case

    Returns:
        (token0, token1) lower-cased with token0 < token1

    Raises:
        InvalidPair: If both addresses are the same token
    """
    a = token_a.lower()
    b = token_b.lower()
    if a == b:
        raise InvalidPair(f"Cannot pair token with itself: {a}")
    return (a, b) if a < b else (b, a)


def tick_spacing_for_fee(fee: int) -> int:
    try:
        return FEE_TICK_SPACING[fee]
    except KeyError:
        raise InvalidPair(f"Unsupported fee tier: {fee}")


@dataclass(frozen=True)
class PoolKey:
    """Canonical (token0, token1, fee) identity of a pool."""

    token0: str
    token1: str
    fee: int

    @classmethod
    def of(cls, token_a: str, token_b: str, fee: int) -> "PoolKey":
        token0, token1 = canonical_pair(token_a, token_b)
        return cls(token0, token1, fee)


@dataclass(frozen=True)
class PoolProbe:
    """A pool key together with the factory getPool call that resolves it."""

    key: PoolKey
    call: LogicalCall


@dataclass(frozen=True)
class PoolState:
    """
    Snapshot of one pool.

    Attributes:
        pool_address: Pool contract address (lower-cased)
        token0: Canonical first token
        token1: Canonical second token
        fee: Fee tier in hundredths of a bip
        tick_spacing: Pool tick spacing
        liquidity: In-range liquidity L
        sqrt_price_x96: Current sqrt price in Q64.96 (0 means uninitialised)
        tick: Current tick
    """

    pool_address: str
    token0: str
    token1: str
    fee: int
    tick_spacing: int
    liquidity: int = 0
    sqrt_price_x96: int = 0
    tick: int = 0

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 > 0

    @property
    def key(self) -> PoolKey:
        return PoolKey(self.token0, self.token1, self.fee)

    def to_dict(
        self,
        token0_meta: Optional[Mapping[str, Any]] = None,
        token1_meta: Optional[Mapping[str, Any]] = None,
        price: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Serialise to the wire format.

        Big integers are emitted as decimal strings so JSON consumers do not
        lose precision.
        """
        data: Dict[str, Any] = {
            "pool": self.pool_address,
            "token0": self.token0,
            "token1": self.token1,
            "fee": self.fee,
            "tickSpacing": self.tick_spacing,
            "liquidity": str(self.liquidity),
            "sqrtPriceX96": str(self.sqrt_price_x96),
            "tick": self.tick,
            "initialized": self.initialized,
        }
        if token0_meta is not None:
            data["t0"] = dict(token0_meta)
        if token1_meta is not None:
            data["t1"] = dict(token1_meta)
        if price is not None:
            data["price"] = price
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PoolState":
        return cls(
            pool_address=str(data["pool"]).lower(),
            token0=str(data["token0"]).lower(),
            token1=str(data["token1"]).lower(),
            fee=int(data["fee"]),
            tick_spacing=int(data["tickSpacing"]),
            liquidity=int(data.get("liquidity", 0)),
            sqrt_price_x96=int(data.get("sqrtPriceX96", 0)),
            tick=int(data.get("tick", 0)),
        )
