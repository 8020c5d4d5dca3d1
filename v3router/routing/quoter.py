"""
Quotes and slippage bounds.

Amounts enter as human decimal strings, are scaled to base units with the
input token's decimals and priced hop by hop through QuoterV2's
quoteExactInputSingle. Each hop's output is re-expressed in human units of
the intermediate token before feeding the next hop.
"""

import asyncio
import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Optional, Union

from ..batchers.base import unwrap_int
from ..batchers.probe import ProbeEngine
from ..chain.abis import QUOTER_V2_ABI
from ..chain.reader import ChainReader
from ..chain.types import Failure, LogicalCall
from ..pools.discovery import PoolDiscoveryService
from ..tokens.registry import TokenRegistry
from .errors import InvalidRoute, NoRouteFound, PoolNotFound, QuoteUnavailable
from .router import RouteSelector
from .types import Quote, Route

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000
MAX_SLIPPAGE_BPS = 5_000

# Enough digits for uint256 amounts at 18+ decimals
DECIMAL_PRECISION = 100

MAX_UINT256 = 2**256 - 1

# Human amounts at or above 1e78 exceed uint256 whatever the decimals
MAX_AMOUNT_EXPONENT = 77

Amount = Union[str, int, Decimal]


def apply_slippage(amount_out: int, slippage_bps: int) -> int:
    """
    Minimum acceptable output: amount_out - amount_out * bps // 10000.

    bps is clamped to [0, 5000].
    """
    bps = max(0, min(MAX_SLIPPAGE_BPS, int(slippage_bps)))
    return amount_out - (amount_out * bps) // BPS_DENOMINATOR


def parse_amount(amount: Amount) -> Optional[Decimal]:
    """Parse a human amount; None when unparsable, non-finite, not positive or beyond uint256."""
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    if value.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return value


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Scale a human amount to integer base units, truncating dust."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return int((amount * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))


def from_base_units(amount: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(amount) / (Decimal(10) ** decimals)


class QuoteCalculator:
    """
    Prices routes with the QuoterV2 contract.

    Args:
        reader: Chain read client
        quoter_address: QuoterV2 contract
        registry: Token decimals (unknown tokens default to 18)
        discovery: Confirms hop pools exist before quoting
        engine: Probe engine used for single reads (built over reader when omitted)
    """

    def __init__(
        self,
        reader: ChainReader,
        quoter_address: str,
        registry: TokenRegistry,
        discovery: PoolDiscoveryService,
        engine: Optional[ProbeEngine] = None,
    ):
        self.reader = reader
        self.quoter_address = quoter_address.lower()
        self.registry = registry
        self.discovery = discovery
        self.engine = engine or discovery.engine

    async def quote_exact_input_single(
        self, token_in: str, token_out: str, fee: int, amount_in: int
    ) -> int:
        """
        Output of one exact-input swap through a single pool, in base units.

        Raises:
            QuoteUnavailable: If the quoter reverts or returns nothing usable
        """
        params = (token_in, token_out, amount_in, fee, 0)
        call = LogicalCall(self.quoter_address, QUOTER_V2_ABI, "quoteExactInputSingle", (params,))
        result = await self.engine.read_one(call)
        if isinstance(result, Failure):
            raise QuoteUnavailable(f"Quote failed for {token_in} -> {token_out} @ {fee}: {result.reason}")

        amount_out = unwrap_int(result)
        if amount_out is None:
            raise QuoteUnavailable(f"Quoter returned no amount for {token_in} -> {token_out} @ {fee}")
        return amount_out

    async def quote(
        self, route: Route, amount_in: Amount, slippage_bps: int = 50
    ) -> Optional[Quote]:
        """
        Quote a route for a human input amount.

        Args:
            route: Route from RouteSelector (or built by hand)
            amount_in: Human amount of route.token_in, e.g. "1.5"
            slippage_bps: Tolerance in basis points, clamped to [0, 5000]

        Returns:
            Quote, or None while the amount is empty, unparsable or not positive

        Raises:
            InvalidRoute: If input and output tokens are the same
            PoolNotFound: If a hop's pool does not exist
            QuoteUnavailable: If the quoter fails for a hop or an amount exceeds uint256
        """
        if route.token_in == route.token_out:
            raise InvalidRoute("Pick two different tokens")

        human = parse_amount(amount_in)
        if human is None:
            return None

        amount_out = 0
        for hop_in, hop_out, fee in route.hops():
            if await self.discovery.get_pool_address(hop_in, hop_out, fee) is None:
                raise PoolNotFound(hop_in, hop_out, fee)

            hop_amount = to_base_units(human, self.registry.decimals_of(hop_in))
            if hop_amount <= 0:
                logger.debug(f"Amount {human} rounds to zero units of {hop_in}")
                return None
            if hop_amount > MAX_UINT256:
                raise QuoteUnavailable(f"Amount {human} of {hop_in} exceeds uint256 in base units")

            amount_out = await self.quote_exact_input_single(hop_in, hop_out, fee, hop_amount)
            human = from_base_units(amount_out, self.registry.decimals_of(hop_out))

        return Quote(amount_out, apply_slippage(amount_out, slippage_bps), route)

    async def best_fee_by_quote(
        self, token_in: str, token_out: str, amount_in: Amount
    ) -> Optional[int]:
        """
        Direct fee tier giving the largest output for amount_in.

        Falls back to the lowest existing fee tier when every quote fails.

        Returns:
            Fee tier, or None while the amount is not a positive number

        Raises:
            InvalidRoute: If both tokens are the same
            NoRouteFound: If no direct pool exists at any tier
            QuoteUnavailable: If the amount does not fit uint256 in base units
        """
        a = token_in.lower()
        b = token_out.lower()
        if a == b:
            raise InvalidRoute("Pick two different tokens")

        human = parse_amount(amount_in)
        if human is None:
            return None

        fee_tiers = self.discovery.config.fee_tiers
        addresses = await asyncio.gather(
            *(self.discovery.get_pool_address(a, b, fee) for fee in fee_tiers)
        )
        existing = [fee for fee, address in zip(fee_tiers, addresses) if address]
        if not existing:
            raise NoRouteFound(f"No pools for {a}/{b}")

        amount = to_base_units(human, self.registry.decimals_of(a))
        if amount > MAX_UINT256:
            raise QuoteUnavailable(f"Amount {human} of {a} exceeds uint256 in base units")

        async def try_quote(fee: int) -> Optional[int]:
            try:
                return await self.quote_exact_input_single(a, b, fee, amount)
            except QuoteUnavailable as e:
                logger.debug(str(e))
                return None

        outputs = await asyncio.gather(*(try_quote(fee) for fee in existing))
        best = None
        for fee, out in zip(existing, outputs):
            if out is not None and (best is None or out > best[1]):
                best = (fee, out)

        if best is None:
            lowest = min(existing)
            logger.info(f"All quotes failed for {a}/{b}; using lowest fee tier {lowest}")
            return lowest
        return best[0]

    async def quote_swap(
        self,
        selector: RouteSelector,
        token_in: str,
        token_out: str,
        amount_in: Amount,
        slippage_bps: int = 50,
    ) -> Optional[Dict[str, Any]]:
        """Select a route and quote it; None while the amount is not positive."""
        route = await selector.select_route(token_in, token_out)
        quote = await self.quote(route, amount_in, slippage_bps)
        return quote.to_dict() if quote else None
