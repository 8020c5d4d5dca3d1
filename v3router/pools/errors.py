"""Exceptions for pool keys and tick ranges."""


class PoolError(Exception):
    """Base exception for pool-level input errors."""
    pass


class InvalidPair(PoolError, ValueError):
    """Raised when two tokens cannot form a pool (e.g. identical addresses)."""
    pass


class InvalidRange(PoolError, ValueError):
    """Raised for misaligned, inverted or out-of-bounds tick ranges."""
    pass
