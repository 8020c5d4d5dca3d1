"""
Redis client for the pool cache.
"""

import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from ...utils.json_helpers import dumps, loads
from .base import CacheInterface, ConnectionError, DataError, StorageBase

logger = logging.getLogger(__name__)


class RedisStorage(StorageBase, CacheInterface):
    """
    Redis cache client.

    Values that are not strings are stored as JSON and decoded on read;
    strings that are not valid JSON come back unchanged.

    Args:
        config: Connection kwargs from CacheConfig.get_redis_connection_kwargs():
            host, port, db, password (optional), decode_responses, socket_timeout
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.client: Optional[Redis] = None

    async def connect(self) -> None:
        """Open a connection pool and ping the server."""
        pool_kwargs = {
            "host": self.config.get("host", "localhost"),
            "port": self.config.get("port", 6379),
            "db": self.config.get("db", 0),
            "decode_responses": self.config.get("decode_responses", True),
            "socket_timeout": self.config.get("socket_timeout", 5),
        }
        if self.config.get("password"):
            pool_kwargs["password"] = self.config["password"]

        try:
            self.client = redis.Redis(connection_pool=redis.ConnectionPool(**pool_kwargs))
            await self.client.ping()
        except Exception as e:
            logger.error(f"Failed to connect to Redis at {pool_kwargs['host']}:{pool_kwargs['port']}: {e}")
            raise ConnectionError(f"Redis connection failed: {e}")

        self.is_connected = True
        logger.info(f"Redis connection established ({pool_kwargs['host']}:{pool_kwargs['port']})")

    async def disconnect(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None
        self.is_connected = False
        logger.info("Redis connection closed")

    async def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            return await self.client.ping() is True
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def _require_client(self) -> Redis:
        if not self.client:
            raise ConnectionError("Not connected to Redis")
        return self.client

    async def _run(self, action: str, key: str, coro) -> Any:
        """Await a Redis command, mapping failures to DataError."""
        try:
            return await coro
        except Exception as e:
            logger.error(f"Redis {action} failed for {key}: {e}")
            raise DataError(f"Cache {action} failed: {e}")

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a value, with SETEX when ttl is given.

        Args:
            key: Cache key, e.g. ``pools:v2:43111``
            value: JSON-serializable value or a string stored as-is
            ttl: Time-to-live in seconds
        """
        client = self._require_client()
        payload = value if isinstance(value, str) else dumps(value)
        command = client.setex(key, ttl, payload) if ttl else client.set(key, payload)
        return await self._run("set", key, command) is True

    async def get(self, key: str) -> Optional[Any]:
        client = self._require_client()
        value = await self._run("get", key, client.get(key))
        if value is None:
            return None
        try:
            return loads(value)
        except (ValueError, TypeError):
            return value

    async def delete(self, key: str) -> bool:
        client = self._require_client()
        return await self._run("delete", key, client.delete(key)) > 0

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds (-1 persistent, -2 missing)."""
        client = self._require_client()
        return await self._run("ttl", key, client.ttl(key))

    async def keys(self, pattern: str) -> List[str]:
        """Keys matching a glob pattern, via SCAN rather than KEYS."""
        client = self._require_client()

        async def scan():
            return [key async for key in client.scan_iter(match=pattern)]

        return await self._run("scan", pattern, scan())
