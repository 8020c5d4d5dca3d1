"""Token metadata for the active chain."""

from .registry import DEFAULT_DECIMALS, Token, TokenRegistry, TokenRegistryError

__all__ = ["DEFAULT_DECIMALS", "Token", "TokenRegistry", "TokenRegistryError"]
