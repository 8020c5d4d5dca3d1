"""Chain read client interface, web3 adapter and contract ABIs."""

from .abis import FACTORY_ABI, MULTICALL3_ABI, POOL_ABI, QUOTER_V2_ABI
from .reader import ChainReader, Web3ChainReader
from .types import Failure, LogicalCall, ProbeResult, Success, normalize_result

__all__ = [
    "ChainReader",
    "Web3ChainReader",
    "LogicalCall",
    "ProbeResult",
    "Success",
    "Failure",
    "normalize_result",
    "FACTORY_ABI",
    "POOL_ABI",
    "QUOTER_V2_ABI",
    "MULTICALL3_ABI",
]
