"""
Storage interfaces for the pool cache.

Only a cache client lives here; the cache backend itself runs elsewhere.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class StorageError(Exception):
    """Base exception for storage-related errors."""
    pass


class ConnectionError(StorageError):
    """The cache backend could not be reached."""
    pass


class DataError(StorageError):
    """A cache read or write failed."""
    pass


class StorageBase(ABC):
    """
    A client with an explicit connection lifecycle.

    Usable as an async context manager:

        async with RedisStorage(kwargs) as cache:
            await cache.get(key)
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.is_connected = False

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the backend answers."""

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


class CacheInterface(ABC):
    """
    Key/value cache with optional expiry.

    Discovery stores lists of pool dicts under one key per chain; a falsy
    ttl means the entry does not expire.
    """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store value under key; True on success."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Value under key, or None when missing or expired."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key; True if it existed."""
