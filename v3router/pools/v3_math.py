"""
Uniswap V3 tick and price math.

Conversions between sqrtPriceX96, ticks and human prices, plus tick range
alignment for liquidity positions.

Key concepts:
- sqrtPriceX96: Square root of price in Q64.96 fixed-point format
- Tick: logarithmic price representation where price = 1.0001^tick
- Tick spacing: only multiples of a pool's spacing can bound a position
  - spacing 1 (0.01% pools), 10 (0.05%), 60 (0.3%), 200 (1%)
- Prices are token1 per token0, adjusted by 10^(decimals0 - decimals1)
"""

import math
from fractions import Fraction
from typing import Tuple, Union

from .errors import InvalidRange

# Tick bounds from TickMath.sol
MIN_TICK = -887272
MAX_TICK = 887272

# Q96 constants
Q96 = 2**96
Q192 = Q96 * Q96

# sqrtPriceX96 bounds at MIN_TICK / MAX_TICK
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

LOG_BASE = math.log(1.0001)

Number = Union[int, float, Fraction]


def price_from_sqrt_price_x96(sqrt_price_x96: int, decimals0: int, decimals1: int) -> float:
    """
    Convert sqrtPriceX96 to a human price (token1 per token0).

    The square and decimal adjustment are done as an exact rational before a
    single conversion to float, so large Q64.96 values keep their precision.

    Args:
        sqrt_price_x96: Pool sqrtPriceX96 from slot0
        decimals0: Decimals of token0
        decimals1: Decimals of token1

    Returns:
        Price, or nan for an uninitialised pool (sqrt_price_x96 <= 0)
    """
    if sqrt_price_x96 <= 0:
        return math.nan
    exact = Fraction(sqrt_price_x96 * sqrt_price_x96 * 10**decimals0, Q192 * 10**decimals1)
    return float(exact)


def price_from_tick(tick: Number, decimals0: int, decimals1: int) -> float:
    """Human price at a tick: 1.0001^tick * 10^(decimals0 - decimals1)."""
    return math.pow(1.0001, tick) * math.pow(10, decimals0 - decimals1)


def tick_from_price(price: float, decimals0: int, decimals1: int) -> float:
    """
    Inverse of price_from_tick, unrounded.

    Returns:
        Fractional tick, or nan for non-positive or non-finite prices
    """
    if not isinstance(price, (int, float)) or not math.isfinite(price) or price <= 0:
        return math.nan
    raw = price / math.pow(10, decimals0 - decimals1)
    return math.log(raw) / LOG_BASE


def align_tick(raw_tick: Number, spacing: int, direction: str) -> int:
    """
    Snap a tick to a multiple of spacing.

    Args:
        raw_tick: Tick to align, may be fractional
        spacing: Pool tick spacing (positive)
        direction: "down" (floor) or "up" (ceil)

    Returns:
        Aligned tick; past the bounds, the outermost multiple of spacing
        inside [MIN_TICK, MAX_TICK]

    Raises:
        InvalidRange: For non-positive spacing, unknown direction or a non-finite tick
    """
    if not isinstance(spacing, int) or isinstance(spacing, bool) or spacing <= 0:
        raise InvalidRange(f"Tick spacing must be a positive integer, got {spacing!r}")
    if direction not in ("down", "up"):
        raise InvalidRange(f"Direction must be 'down' or 'up', got {direction!r}")
    if isinstance(raw_tick, float) and not math.isfinite(raw_tick):
        raise InvalidRange(f"Cannot align non-finite tick {raw_tick}")

    steps = Fraction(raw_tick) / spacing
    if direction == "down":
        aligned = math.floor(steps) * spacing
    else:
        aligned = math.ceil(steps) * spacing
    lowest = math.ceil(Fraction(MIN_TICK, spacing)) * spacing
    highest = math.floor(Fraction(MAX_TICK, spacing)) * spacing
    return max(lowest, min(highest, aligned))


def full_range_ticks(spacing: int) -> Tuple[int, int]:
    """Widest aligned range for a spacing, e.g. (-887220, 887220) for 60."""
    return align_tick(MIN_TICK, spacing, "up"), align_tick(MAX_TICK, spacing, "down")


def ticks_from_percent_band(current_tick: int, spacing: int, pct: float) -> Tuple[int, int]:
    """
    Aligned range covering price * (1 - pct%) .. price * (1 + pct%).

    The lower bound is aligned down and the upper bound up, so the range
    never ends up narrower than requested.

    Args:
        current_tick: Pool's current tick
        spacing: Pool tick spacing
        pct: Band half-width in percent, 0 < pct < 100

    Returns:
        (lower_tick, upper_tick)
    """
    if not isinstance(pct, (int, float)) or not math.isfinite(pct) or not 0 < pct < 100:
        raise InvalidRange(f"Percent band must be within (0, 100), got {pct!r}")

    lower_raw = current_tick + math.log(1 - pct / 100) / LOG_BASE
    upper_raw = current_tick + math.log(1 + pct / 100) / LOG_BASE
    return align_tick(lower_raw, spacing, "down"), align_tick(upper_raw, spacing, "up")


def validate_tick_range(lower: int, upper: int, spacing: int) -> None:
    """
    Check that a range could bound a position.

    Raises:
        InvalidRange: If ticks are out of bounds, misaligned or not strictly increasing
    """
    if spacing <= 0:
        raise InvalidRange(f"Tick spacing must be positive, got {spacing}")
    for name, tick in (("lower", lower), ("upper", upper)):
        if not MIN_TICK <= tick <= MAX_TICK:
            raise InvalidRange(f"{name} tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
        if tick % spacing != 0:
            raise InvalidRange(f"{name} tick {tick} not a multiple of spacing {spacing}")
    if lower >= upper:
        raise InvalidRange(f"lower tick {lower} must be below upper tick {upper}")


def sqrt_price_x96_at_tick(tick: int) -> int:
    """
    Calculate sqrtPriceX96 at a tick.

    Integer port of TickMath.getSqrtRatioAtTick: the ratio is built in Q128
    from per-bit multipliers, inverted for positive ticks and rounded up when
    converted to Q96.

    Args:
        tick: The tick value

    Returns:
        sqrtPriceX96
    """
    if not MIN_TICK <= tick <= MAX_TICK:
        raise InvalidRange(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = abs(tick)

    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128

    if abs_tick & 0x2:
        ratio = (ratio * 0xFFF97272373D413259A46990580E213A) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xFFF2E50F5F656932EF12357CF3C7FDCC) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xFFE5CACA7E10E4E61C3624EAA0941CD0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xFFCB9843D60F6159C9DB58835C926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xFF973B41FA98C081472E6896DFB254C0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xFF2EA16466C96A3843EC78B326B52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xFE5DEE046A99A2A811C461F1969C3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xFCBE86C7900A88AEDCFFC83B479AA3A4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xF987A7253AC413176F2B074CF7815E54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xF3392B0822B70005940C7A398E4B70F3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xE7159475A2C29B7443B29C7FA6E889D9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xD097F3BDFD2022B8845AD8F792AA5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xA9F746462D870FDF8A65DC1F90E061E5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70D869A156D2A1B890BB3DF62BAF32F7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31BE135F97D08FD981231505542FCFA6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9AA508B5B7A84E1C677DE54F3E99BC9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5D6AF8DEDB81196699C329225EE604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216E584F5FA1EA926041BEDFE98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48A170391F7DC42444E8FA2) >> 128

    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio

    # Q128 -> Q96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)
