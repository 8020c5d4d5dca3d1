"""Exceptions raised by route selection and quoting."""


class RoutingError(Exception):
    """Base exception for routing errors."""
    pass


class InvalidRoute(RoutingError, ValueError):
    """Raised for malformed routes, e.g. identical input and output tokens."""
    pass


class PoolNotFound(RoutingError):
    """Raised when a hop's pool does not exist."""

    def __init__(self, token_a: str, token_b: str, fee: int):
        super().__init__(f"No pool for {token_a}/{token_b} at fee {fee}")
        self.token_a = token_a
        self.token_b = token_b
        self.fee = fee


class NoRouteFound(RoutingError):
    """Raised when neither a direct nor an intermediary route exists."""
    pass


class QuoteUnavailable(RoutingError):
    """Raised when the quoter contract cannot price a hop."""
    pass
