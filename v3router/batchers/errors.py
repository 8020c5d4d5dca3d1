"""
Error handling for chain reads.

Per-call failures are normally absorbed into Failure results; the exceptions
here describe why, and ErrorHandler decides which RPC errors are worth
retrying. Classification looks at exception types from web3 and aiohttp
first, then JSON-RPC error codes, then the message text.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from aiohttp import ClientConnectionError, ClientResponseError
from web3.exceptions import ContractLogicError, Web3RPCError

logger = logging.getLogger(__name__)

RATE_LIMIT = "rate_limit"
NETWORK = "network"
CONTRACT = "contract"
VALIDATION = "validation"
UNKNOWN = "unknown"

RETRYABLE = (NETWORK, RATE_LIMIT, UNKNOWN)

# JSON-RPC codes seen from public endpoints
RPC_CODES: Dict[int, str] = {
    -32005: RATE_LIMIT,  # limit exceeded
    429: RATE_LIMIT,
    3: CONTRACT,  # execution reverted with data
    -32015: CONTRACT,  # VM execution error
    -32602: VALIDATION,  # invalid params
    -32600: VALIDATION,  # invalid request
}

# Checked in order; first match wins
MESSAGE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (RATE_LIMIT, ("rate limit", "too many requests", "429", "limit exceeded")),
    (NETWORK, ("connection", "timeout", "timed out", "network", "dns", "502", "503")),
    (CONTRACT, ("revert", "out of gas", "invalid opcode")),
    (VALIDATION, ("invalid", "bad request", "400")),
)


class BatchError(Exception):
    """Base exception for chain read operations."""
    pass


class RpcCallFailure(BatchError):
    """A single logical call failed. Degrades to an absent/zero value."""

    def __init__(self, message: str, call: Optional[str] = None):
        super().__init__(message)
        self.call = call


class BatchDegraded(BatchError):
    """An aggregated read was unusable and the chunk fell back to per-call reads."""

    def __init__(self, message: str, success_ratio: Optional[float] = None):
        super().__init__(message)
        self.success_ratio = success_ratio


class RateLimitError(BatchError):
    """The RPC endpoint asked us to slow down."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(BatchError):
    pass


class ContractError(BatchError):
    pass


def rpc_error_code(error: Exception) -> Optional[int]:
    """JSON-RPC error code carried by a web3 error, if any."""
    response = getattr(error, "rpc_response", None)
    if isinstance(response, dict):
        body = response.get("error")
        if isinstance(body, dict) and isinstance(body.get("code"), int):
            return body["code"]
    if error.args and isinstance(error.args[0], dict):
        code = error.args[0].get("code")
        if isinstance(code, int):
            return code
    return None


class ErrorHandler:
    """
    Classifies RPC errors, picks retry delays and logs them.

    Reverts are expected while probing (getPool on unlisted pairs, dead
    pools) and are logged at debug level only.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error as rate_limit, network, contract, validation or unknown.

        Args:
            error: Exception raised by a chain read

        Returns:
            Error category string
        """
        if isinstance(error, RateLimitError):
            return RATE_LIMIT
        if isinstance(error, (NetworkError, ClientConnectionError, asyncio.TimeoutError)):
            return NETWORK
        if isinstance(error, (ContractError, ContractLogicError)):
            return CONTRACT
        if isinstance(error, ClientResponseError):
            return RATE_LIMIT if error.status == 429 else NETWORK

        code = rpc_error_code(error)
        if code in RPC_CODES:
            return RPC_CODES[code]

        message = str(error).lower()
        for category, keywords in MESSAGE_KEYWORDS:
            if any(keyword in message for keyword in keywords):
                return category

        if isinstance(error, Web3RPCError):
            return NETWORK
        return UNKNOWN

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Whether a failed read is worth another attempt.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            max_retries: Maximum number of attempts allowed
        """
        if attempt + 1 >= max_retries:
            return False
        # Reverts and bad input are deterministic
        return self.classify_error(error) in RETRYABLE

    def get_retry_delay(self, error: Exception, attempt: int) -> float:
        """Backoff in seconds: 2**attempt capped at 60, doubled for rate limits."""
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return error.retry_after

        base_delay = min(2 ** attempt, 60)
        category = self.classify_error(error)
        if category == RATE_LIMIT:
            return base_delay * 2
        if category == NETWORK:
            return base_delay
        return base_delay * 1.5

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log error with a level chosen by category.

        Args:
            error: Exception to log
            context: Extra fields for the log record (chunk, attempt, call)
        """
        category = self.classify_error(error)
        log_data = {
            "error_type": type(error).__name__,
            "error_category": category,
            "error_message": str(error),
            "rpc_code": rpc_error_code(error),
            **context,
        }

        if category == CONTRACT:
            self.logger.debug(f"Contract call reverted: {error}", extra=log_data)
        elif category == RATE_LIMIT:
            self.logger.info(f"RPC rate limit hit: {error}", extra=log_data)
        else:
            self.logger.warning(f"Chain read error ({category}): {error}", extra=log_data)
