"""
In-process cache with TTL, for tests and single-process runs without Redis.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .base import CacheInterface

logger = logging.getLogger(__name__)


class MemoryCache(CacheInterface):
    """Dictionary-backed CacheInterface; entries expire lazily on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        expires_at = self._clock() + ttl if ttl else None
        self._entries[key] = (value, expires_at)
        return True

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            logger.debug(f"Cache key {key} expired")
            del self._entries[key]
            return None
        return value

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def ttl_of(self, key: str) -> Optional[float]:
        """Seconds until key expires, None when missing or persistent."""
        entry = self._entries.get(key)
        if entry is None or entry[1] is None:
            return None
        return max(0.0, entry[1] - self._clock())
