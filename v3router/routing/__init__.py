"""
Swap route selection and quoting.
"""

from .errors import InvalidRoute, NoRouteFound, PoolNotFound, QuoteUnavailable, RoutingError
from .quoter import QuoteCalculator, apply_slippage, parse_amount
from .router import RouteSelector
from .types import Quote, Route

__all__ = [
    "InvalidRoute",
    "NoRouteFound",
    "PoolNotFound",
    "QuoteUnavailable",
    "RoutingError",
    "QuoteCalculator",
    "apply_slippage",
    "parse_amount",
    "RouteSelector",
    "Quote",
    "Route",
]
