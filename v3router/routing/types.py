"""
Route and quote value types.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ..pools.pool_types import FEE_TIERS
from .errors import InvalidRoute

MAX_HOPS = 2


@dataclass(frozen=True)
class Route:
    """
    A swap path: tokens[i] -> tokens[i + 1] through a pool at fees[i].

    Attributes:
        tokens: Lower-cased token addresses, input first
        fees: One fee tier per hop
        liquidity: Selection score (pool liquidity, or the bottleneck for two hops)
    """

    tokens: Tuple[str, ...]
    fees: Tuple[int, ...]
    liquidity: int = 0

    def __post_init__(self):
        tokens = tuple(t.lower() for t in self.tokens)
        fees = tuple(self.fees)
        object.__setattr__(self, "tokens", tokens)
        object.__setattr__(self, "fees", fees)

        if len(tokens) < 2:
            raise InvalidRoute("A route needs at least two tokens")
        if len(fees) != len(tokens) - 1:
            raise InvalidRoute(f"Expected {len(tokens) - 1} fees, got {len(fees)}")
        if len(fees) > MAX_HOPS:
            raise InvalidRoute(f"Routes are limited to {MAX_HOPS} hops")
        for fee in fees:
            if fee not in FEE_TIERS:
                raise InvalidRoute(f"Unsupported fee tier: {fee}")
        for a, b in zip(tokens, tokens[1:]):
            if a == b:
                raise InvalidRoute(f"Adjacent hop tokens must differ: {a}")

    @property
    def token_in(self) -> str:
        return self.tokens[0]

    @property
    def token_out(self) -> str:
        return self.tokens[-1]

    @property
    def is_direct(self) -> bool:
        return len(self.fees) == 1

    def hops(self) -> List[Tuple[str, str, int]]:
        """(token_in, token_out, fee) per hop."""
        return [(self.tokens[i], self.tokens[i + 1], fee) for i, fee in enumerate(self.fees)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokens": list(self.tokens),
            "fees": list(self.fees),
            "liquidity": str(self.liquidity),
        }


@dataclass(frozen=True)
class Quote:
    """Quoted output in base units, and the slippage-bounded minimum."""

    amount_out: int
    min_amount_out: int
    route: Route

    def __post_init__(self):
        if not 0 <= self.min_amount_out <= self.amount_out:
            raise ValueError(
                f"min_amount_out {self.min_amount_out} outside [0, {self.amount_out}]"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "route": self.route.to_dict(),
            "amountOut": str(self.amount_out),
            "minAmountOut": str(self.min_amount_out),
        }
