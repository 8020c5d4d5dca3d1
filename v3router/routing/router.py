"""
Route selection.

A direct pool always wins when one exists at any fee tier; only then is a
two-hop route through the intermediary token (usually wrapped native)
considered. Among candidates the highest liquidity wins, with the two-hop
score being the smaller of its two pool liquidities.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from ..pools.discovery import PoolDiscoveryService
from ..pools.pool_types import FEE_TIERS
from .errors import InvalidRoute, NoRouteFound
from .types import Route

logger = logging.getLogger(__name__)


class RouteSelector:
    """
    Chooses a swap route using pool existence and liquidity reads.

    Args:
        discovery: Provides get_pool_address() and get_liquidity()
        intermediary: Token used for two-hop routes
        fee_tiers: Tiers to check, in tie-breaking order
    """

    def __init__(
        self,
        discovery: PoolDiscoveryService,
        intermediary: str,
        fee_tiers: Sequence[int] = FEE_TIERS,
    ):
        self.discovery = discovery
        self.intermediary = intermediary.lower()
        self.fee_tiers = tuple(fee_tiers)

    async def select_route(self, token_in: str, token_out: str) -> Route:
        """
        Pick the route for swapping token_in into token_out.

        Raises:
            InvalidRoute: If both tokens are the same
            NoRouteFound: If no direct pool and no intermediary route exists
        """
        a = token_in.lower()
        b = token_out.lower()
        if a == b:
            raise InvalidRoute("Pick two different tokens")

        direct = await self._best_direct(a, b)
        if direct is not None:
            fee, liquidity = direct
            logger.info(f"Direct route {a} -> {b} at fee {fee} (liquidity {liquidity})")
            return Route((a, b), (fee,), liquidity)

        mid = self.intermediary
        if mid not in (a, b):
            via = await self._best_via(a, mid, b)
            if via is not None:
                fee, bottleneck = via
                logger.info(
                    f"Route {a} -> {mid} -> {b} at fee {fee} (bottleneck liquidity {bottleneck})"
                )
                return Route((a, mid, b), (fee, fee), bottleneck)

        raise NoRouteFound(f"No route from {a} to {b}")

    async def _liquidity_by_fee(self, a: str, b: str) -> List[Optional[int]]:
        """Liquidity per fee tier, None where the pool does not exist."""
        addresses = await asyncio.gather(
            *(self.discovery.get_pool_address(a, b, fee) for fee in self.fee_tiers)
        )

        async def liquidity_of(address: Optional[str]) -> Optional[int]:
            if address is None:
                return None
            return await self.discovery.get_liquidity(address)

        return list(await asyncio.gather(*(liquidity_of(addr) for addr in addresses)))

    async def _best_direct(self, a: str, b: str) -> Optional[Tuple[int, int]]:
        best: Optional[Tuple[int, int]] = None
        for fee, liquidity in zip(self.fee_tiers, await self._liquidity_by_fee(a, b)):
            if liquidity is None:
                continue
            # Strict comparison: the first tier checked wins ties
            if best is None or liquidity > best[1]:
                best = (fee, liquidity)
        return best

    async def _best_via(self, a: str, mid: str, b: str) -> Optional[Tuple[int, int]]:
        first, second = await asyncio.gather(
            self._liquidity_by_fee(a, mid), self._liquidity_by_fee(mid, b)
        )
        best: Optional[Tuple[int, int]] = None
        for fee, liq1, liq2 in zip(self.fee_tiers, first, second):
            if liq1 is None or liq2 is None:
                continue
            bottleneck = min(liq1, liq2)
            if best is None or bottleneck > best[1]:
                best = (fee, bottleneck)
        return best
