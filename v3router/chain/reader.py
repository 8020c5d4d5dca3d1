"""
Chain read clients.

All discovery and routing code depends on the narrow ChainReader interface.
Web3ChainReader is the production adapter: single reads go through
AsyncWeb3 contract calls and batched reads are folded into one Multicall3
``aggregate3`` eth_call with per-call failure allowed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from aiohttp import ClientTimeout
from eth_abi import decode
from eth_utils import is_address, to_bytes, to_checksum_address
from eth_utils.abi import collapse_if_tuple
from web3 import AsyncHTTPProvider, AsyncWeb3

from .abis import MULTICALL3_ABI
from .types import Failure, LogicalCall, ProbeResult, Success

logger = logging.getLogger(__name__)


class ChainReader(ABC):
    """Read-only access to contract state."""

    @property
    def supports_batch(self) -> bool:
        """Whether read_batch() is backed by an aggregated call."""
        return False

    @abstractmethod
    async def read(self, call: LogicalCall) -> Any:
        """
        Execute a single contract read.

        Returns:
            The decoded return value (a bare value for one output, a
            sequence for several)

        Raises:
            Exception: Whatever the transport raises; callers decide how to absorb it
        """

    async def read_batch(
        self, calls: Sequence[LogicalCall], allow_partial_failure: bool = True
    ) -> List[Any]:
        """
        Execute several reads in one aggregated request.

        Implementations return one entry per call in input order. Entries may
        be ProbeResult instances or any shape accepted by normalize_result().
        """
        raise NotImplementedError(f"{type(self).__name__} has no batched read support")


def _checksum_args(value: Any) -> Any:
    """Checksum every address-looking string; web3 rejects lower-case addresses."""
    if isinstance(value, str) and len(value) == 42 and is_address(value):
        return to_checksum_address(value)
    if isinstance(value, (list, tuple)):
        return type(value)(_checksum_args(v) for v in value)
    return value


def _function_abi(abi: Sequence[Dict[str, Any]], name: str) -> Dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise ValueError(f"Function {name} not found in ABI")


class Web3ChainReader(ChainReader):
    """ChainReader backed by web3.py's AsyncWeb3."""

    def __init__(self, web3: AsyncWeb3, multicall_address: Optional[str] = None):
        self.web3 = web3
        self.multicall_address = (
            to_checksum_address(multicall_address) if multicall_address else None
        )
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_rpc_url(
        cls, rpc_url: str, multicall_address: Optional[str] = None, timeout: float = 30.0
    ) -> "Web3ChainReader":
        """Build a reader for an HTTP(S) RPC endpoint."""
        provider = AsyncHTTPProvider(
            rpc_url, request_kwargs={"timeout": ClientTimeout(total=timeout)}
        )
        return cls(AsyncWeb3(provider), multicall_address)

    @property
    def supports_batch(self) -> bool:
        return self.multicall_address is not None

    def _contract(self, call: LogicalCall):
        return self.web3.eth.contract(address=to_checksum_address(call.address), abi=call.abi)

    async def read(self, call: LogicalCall) -> Any:
        contract = self._contract(call)
        function = getattr(contract.functions, call.function_name)
        return await function(*_checksum_args(call.args)).call()

    async def read_batch(
        self, calls: Sequence[LogicalCall], allow_partial_failure: bool = True
    ) -> List[ProbeResult]:
        if not self.multicall_address:
            return await super().read_batch(calls, allow_partial_failure)

        payload = []
        for call in calls:
            call_data = self._contract(call).encode_abi(
                call.function_name, args=list(_checksum_args(call.args))
            )
            payload.append(
                (to_checksum_address(call.address), allow_partial_failure, to_bytes(hexstr=call_data))
            )

        multicall = self.web3.eth.contract(address=self.multicall_address, abi=MULTICALL3_ABI)
        raw_results = await multicall.functions.aggregate3(payload).call()

        return [
            self._decode_entry(call, success, return_data)
            for call, (success, return_data) in zip(calls, raw_results)
        ]

    def _decode_entry(self, call: LogicalCall, success: bool, return_data: bytes) -> ProbeResult:
        """Decode one aggregate3 entry into a ProbeResult."""
        if not success:
            return Failure(f"reverted: {call.describe()}")
        if not return_data:
            # Call to an address without code
            return Failure(f"empty return data: {call.describe()}")
        try:
            outputs = _function_abi(call.abi, call.function_name)["outputs"]
            values = decode([collapse_if_tuple(o) for o in outputs], bytes(return_data))
        except Exception as e:
            self.logger.debug(f"Failed to decode {call.describe()}: {e}")
            return Failure(f"decode error: {e}")
        return Success(values[0] if len(values) == 1 else list(values))
