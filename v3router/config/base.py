"""
Base configuration management for v3router.
"""

import os
import logging
from typing import List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("local", "dev", "staging", "production", "test")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


class ConfigMissing(ConfigError):
    """Raised when a required address or endpoint is not configured."""
    pass


# Dataclass field helpers: environment is read when the config object is
# created, not when the module is imported.

def env_str(key: str, default: Optional[str] = None):
    return field(default_factory=lambda: BaseConfig.get_env(key, default))


def env_int(key: str, default: int):
    return field(default_factory=lambda: BaseConfig.get_env_int(key, default))


def env_float(key: str, default: float):
    return field(default_factory=lambda: BaseConfig.get_env_float(key, default))


def env_bool(key: str, default: bool = False):
    return field(default_factory=lambda: BaseConfig.get_env_bool(key, default))


@dataclass
class BaseConfig:
    """Environment and logging settings shared by every config section."""

    # Environment
    ENVIRONMENT: str = env_str("ENVIRONMENT", "local")
    LOG_LEVEL: str = env_str("LOG_LEVEL", "INFO")

    def __post_init__(self):
        """Initialize configuration after dataclass creation."""
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        """Setup logging configuration."""
        level = getattr(logging, self.LOG_LEVEL.upper(), None)
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(level=level, format=LOG_FORMAT)

    def _validate_config(self):
        """Validate configuration values."""
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """Raw environment value; ConfigMissing when required and empty."""
        value = os.getenv(key, default)
        if required and not value:
            raise ConfigMissing(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def _get_env_as(key: str, default, cast, type_name: str, required: bool = False):
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return cast(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be {type_name}, got: {value}")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        return BaseConfig._get_env_as(key, default, int, "an integer", required)

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        return BaseConfig._get_env_as(key, default, float, "a float", required)

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        """Get environment variable as boolean."""
        value = BaseConfig.get_env(key, str(default))
        return value.lower() in ("true", "1", "yes", "on")

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Get environment variable as list."""
        value = BaseConfig.get_env(key, separator.join(default) if default else "")
        return [item.strip() for item in value.split(separator) if item.strip()] if value else []
