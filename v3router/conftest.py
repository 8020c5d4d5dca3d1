"""
Shared fixtures: an in-memory chain and a small token list.

FakeChainReader answers factory getPool, pool state and QuoterV2 reads from
dictionaries, and can simulate a broken aggregated read path.
"""

from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from v3router.batchers.base import ZERO_ADDRESS
from v3router.chain.reader import ChainReader
from v3router.chain.types import Failure, LogicalCall, Success
from v3router.pools.pool_types import PoolKey, canonical_pair
from v3router.tokens.registry import Token, TokenRegistry

CHAIN_ID = 43111

FACTORY = "0x346239972d1fa486fc4a521031bc81bfb7d6e8a4"
QUOTER = "0xcba55304013187d49d4012f4d7e4b63a04405cd5"

WETH = "0x4200000000000000000000000000000000000006"
USDC = "0xad11a8beb98bbf61dbb1aa0f6d6f2ecd87b35afa"
TKA = "0x1111111111111111111111111111111111111111"
TKB = "0x2222222222222222222222222222222222222222"
TKC = "0x3333333333333333333333333333333333333333"

# About 2000 USDC per WETH (WETH is token0), tick -200311
SQRT_PRICE_X96 = 3543191142285914205922034


def pool_address(n: int) -> str:
    return f"0x{0xb00 + n:040x}"


class FakeChainReader(ChainReader):
    """
    In-memory ChainReader.

    Args:
        pools: {(token_a, token_b, fee): pool_address}
        states: {pool_address: {"slot0": [...], "liquidity": int, "tickSpacing": int}};
            a missing entry makes that read revert
        quotes: {(token_in, token_out, fee): rate}; amountOut = amountIn * rate
        batch_mode: "ok", "raise" (aggregated read raises), "fail" (every
            entry fails), "short" (drops the last entry) or "none" (no batch support)
    """

    def __init__(
        self,
        pools: Optional[Dict[Tuple[str, str, int], str]] = None,
        states: Optional[Dict[str, Dict[str, Any]]] = None,
        quotes: Optional[Dict[Tuple[str, str, int], Any]] = None,
        batch_mode: str = "ok",
    ):
        self.pools = {}
        for (a, b, fee), address in (pools or {}).items():
            token0, token1 = canonical_pair(a, b)
            self.pools[PoolKey(token0, token1, fee)] = address.lower()
        self.states = {k.lower(): v for k, v in (states or {}).items()}
        self.quotes = {(a.lower(), b.lower(), fee): Fraction(rate) for (a, b, fee), rate in (quotes or {}).items()}
        self.batch_mode = batch_mode
        self.reads: List[LogicalCall] = []
        self.batches: List[int] = []

    @property
    def supports_batch(self) -> bool:
        return self.batch_mode != "none"

    def _execute(self, call: LogicalCall) -> Any:
        name = call.function_name
        if name == "getPool":
            token0, token1, fee = call.args
            return self.pools.get(PoolKey(token0.lower(), token1.lower(), fee), ZERO_ADDRESS)
        if name in ("slot0", "liquidity", "tickSpacing"):
            state = self.states.get(call.address.lower(), {})
            if name not in state:
                raise RuntimeError(f"execution reverted: {name}")
            return state[name]
        if name == "quoteExactInputSingle":
            token_in, token_out, amount_in, fee, _ = call.args[0]
            rate = self.quotes.get((token_in.lower(), token_out.lower(), fee))
            if rate is None:
                raise RuntimeError("execution reverted: SPL")
            return [int(amount_in * rate), 0, 1, 90000]
        raise RuntimeError(f"unknown function {name}")

    async def read(self, call: LogicalCall) -> Any:
        self.reads.append(call)
        return self._execute(call)

    async def read_batch(self, calls: Sequence[LogicalCall], allow_partial_failure: bool = True) -> List[Any]:
        self.batches.append(len(calls))
        if self.batch_mode == "none":
            return await super().read_batch(calls, allow_partial_failure)
        if self.batch_mode == "raise":
            raise RuntimeError("multicall: connection reset")
        if self.batch_mode == "fail":
            return [Failure("reverted") for _ in calls]

        results = []
        for call in calls:
            try:
                results.append(Success(self._execute(call)))
            except RuntimeError as e:
                results.append(Failure(str(e)))
        if self.batch_mode == "short":
            return results[:-1]
        return results


def make_state(liquidity: int = 10**18, sqrt_price_x96: int = SQRT_PRICE_X96, tick: int = -200311, spacing: int = 60):
    return {
        "slot0": [sqrt_price_x96, tick, 0, 1, 1, 0, True],
        "liquidity": liquidity,
        "tickSpacing": spacing,
    }


TOKEN_LIST = {
    "name": "Test list",
    "tokens": [
        {"chainId": CHAIN_ID, "address": WETH, "symbol": "WETH", "name": "Wrapped Ether", "decimals": 18},
        {"chainId": CHAIN_ID, "address": USDC, "symbol": "USDC.e", "name": "Bridged USDC", "decimals": 6},
        {"chainId": CHAIN_ID, "address": TKA, "symbol": "TKA", "name": "Token A", "decimals": 18},
        {"chainId": CHAIN_ID, "address": TKB, "symbol": "TKB", "name": "Token B", "decimals": 8},
        {"chainId": CHAIN_ID, "address": TKC, "symbol": "TKC", "name": "Token C", "decimals": 18},
        {"chainId": 1, "address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "symbol": "WETH", "name": "Wrapped Ether", "decimals": 18},
    ],
}


@pytest.fixture
def token_list() -> Dict[str, Any]:
    return TOKEN_LIST


@pytest.fixture
def registry() -> TokenRegistry:
    return TokenRegistry.from_token_list(TOKEN_LIST, CHAIN_ID)


@pytest.fixture
def weth_token(registry) -> Token:
    return registry.require(WETH)
