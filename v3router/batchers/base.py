"""
Base types for batched chain reads.

BatchConfig tunes the probe engine; unwrap() and unwrap_address() read
values back out of ProbeResults without branching on backend shapes.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, TypeVar

from ..chain.types import Failure, ProbeResult, Success, normalize_result


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

T = TypeVar("T")


@dataclass
class BatchConfig:
    """Configuration for batch operations."""

    batch_size: int = 150
    # Below this share of successes an aggregated chunk is treated as broken
    min_success_ratio: float = 0.05
    # Attempts per independent read (1 = no retry)
    max_retries: int = 1
    # Multiplier applied to ErrorHandler backoff delays
    retry_delay: float = 1.0

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if not 0.0 <= self.min_success_ratio <= 1.0:
            raise ValueError("min_success_ratio must be within [0, 1]")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")


def chunked(items: Sequence[T], chunk_size: int) -> List[Sequence[T]]:
    """Split items into consecutive chunks of chunk_size."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [items[i : i + chunk_size] for i in range(0, len(items), chunk_size)]


def success_ratio(results: Sequence[ProbeResult]) -> float:
    if not results:
        return 0.0
    return sum(1 for r in results if isinstance(r, Success)) / len(results)


def unwrap(result: Any) -> Optional[Any]:
    """Return the value of a successful result, or None."""
    result = normalize_result(result)
    if isinstance(result, Failure):
        return None
    return result.value


def unwrap_address(result: Any) -> Optional[str]:
    """
    Return a lower-cased address from a successful result.

    The zero address, ``"0x"``, short strings and non-string payloads are
    treated as absent. Tuple/list payloads use their first element.
    """
    value = unwrap(result)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if not isinstance(value, str):
        return None
    address = value.lower()
    if address == "0x" or len(address) < 42 or address == ZERO_ADDRESS:
        return None
    return address


def unwrap_int(result: Any, index: Optional[int] = None) -> Optional[int]:
    """Return an integer (optionally element ``index`` of a tuple) or None."""
    value = unwrap(result)
    if index is not None:
        if not isinstance(value, (list, tuple)) or len(value) <= index:
            return None
        value = value[index]
    elif isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
