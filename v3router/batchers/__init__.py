"""
Batched chain reads.

This package executes many logical contract reads against an unreliable RPC
layer: aggregated where possible, per call where not, always returning one
Success/Failure result per call.
"""

from .base import (
    ZERO_ADDRESS,
    BatchConfig,
    chunked,
    unwrap,
    unwrap_address,
    unwrap_int,
)
from .errors import (
    BatchDegraded,
    BatchError,
    ContractError,
    ErrorHandler,
    NetworkError,
    RateLimitError,
    RpcCallFailure,
)
from .probe import ProbeEngine

__all__ = [
    "ZERO_ADDRESS",
    "BatchConfig",
    "chunked",
    "unwrap",
    "unwrap_address",
    "unwrap_int",
    "BatchError",
    "BatchDegraded",
    "RpcCallFailure",
    "RateLimitError",
    "NetworkError",
    "ContractError",
    "ErrorHandler",
    "ProbeEngine",
]
