"""
Cache clients for discovered pool data.

Usage:
    from v3router.core.storage import RedisStorage

    cache = RedisStorage(config.cache.get_redis_connection_kwargs())
    await cache.connect()
    await cache.set("pools:v2:43111", pools, ttl=3600)
"""

from .base import CacheInterface, ConnectionError, DataError, StorageBase, StorageError
from .memory import MemoryCache
from .redis import RedisStorage

__all__ = [
    "CacheInterface",
    "StorageBase",
    "StorageError",
    "ConnectionError",
    "DataError",
    "MemoryCache",
    "RedisStorage",
]
