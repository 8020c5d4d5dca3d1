"""
Cache configuration for v3router.
"""

from dataclasses import dataclass
from typing import Optional

from .base import BaseConfig, env_bool, env_int, env_str


@dataclass
class CacheConfig(BaseConfig):
    """Redis connection and TTL settings for the pool cache."""

    CACHE_ENABLED: bool = env_bool("CACHE_ENABLED", False)

    # Redis Configuration
    REDIS_HOST: str = env_str("REDIS_HOST", "localhost")
    REDIS_PORT: int = env_int("REDIS_PORT", 6379)
    REDIS_PASSWORD: Optional[str] = env_str("REDIS_PASSWORD", None)
    REDIS_DB: int = env_int("REDIS_DB", 0)
    CONNECTION_TIMEOUT: int = env_int("CONNECTION_TIMEOUT", 5)

    # TTLs in seconds
    POOLS_CACHE_TTL: int = env_int("POOLS_CACHE_TTL", 3600)
    EMPTY_POOLS_CACHE_TTL: int = env_int("EMPTY_POOLS_CACHE_TTL", 300)

    # Bump when the cached record layout changes
    POOLS_KEY_VERSION: str = "v2"

    def get_redis_connection_kwargs(self) -> dict:
        """Get Redis connection parameters."""
        kwargs = {
            "host": self.REDIS_HOST,
            "port": self.REDIS_PORT,
            "db": self.REDIS_DB,
            "decode_responses": True,
            "socket_timeout": self.CONNECTION_TIMEOUT,
        }

        # Only add password if it's actually set and not empty/whitespace
        if self.REDIS_PASSWORD and self.REDIS_PASSWORD.strip():
            kwargs["password"] = self.REDIS_PASSWORD.strip()

        return kwargs
