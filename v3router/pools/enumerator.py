"""
Pair and fee tier enumeration.

Builds the bounded, deterministic list of (pair, fee) candidates that pool
discovery probes against the factory.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from ..chain.abis import FACTORY_ABI
from ..chain.types import LogicalCall
from .pool_types import FEE_TIERS, PoolKey, PoolProbe, canonical_pair


Pair = Tuple[str, str]


class PairFeeEnumerator:
    """
    Enumerate candidate pools over a bounded token universe.

    Output order depends only on input order: tokens keep their list order,
    pairs follow (i < j) index order and probes are pair-major, fee-minor.
    """

    def __init__(
        self,
        max_tokens: int = 120,
        max_pairs: int = 4000,
        fee_tiers: Sequence[int] = FEE_TIERS,
    ):
        if max_tokens <= 0 or max_pairs <= 0:
            raise ValueError("max_tokens and max_pairs must be positive")
        self.max_tokens = max_tokens
        self.max_pairs = max_pairs
        self.fee_tiers = tuple(fee_tiers)

    def token_addresses(self, tokens: Iterable[str]) -> List[str]:
        """Lower-case, de-duplicate (first occurrence wins) and cap to max_tokens."""
        seen = set()
        addresses = []
        for token in tokens:
            address = token.lower()
            if address in seen:
                continue
            seen.add(address)
            addresses.append(address)
            if len(addresses) >= self.max_tokens:
                break
        return addresses

    def pairs(self, tokens: Sequence[str], max_pairs: Optional[int] = None) -> List[Pair]:
        """
        All unordered pairs of tokens in index order, canonicalised.

        Args:
            tokens: Token addresses (already de-duplicated)
            max_pairs: Override for the pair cap (positive)

        Returns:
            Up to max_pairs (token0, token1) tuples
        """
        cap = self.max_pairs if max_pairs is None else max_pairs
        if cap <= 0:
            raise ValueError(f"max_pairs must be positive, got {cap}")
        result: List[Pair] = []
        for i in range(len(tokens)):
            for j in range(i + 1, len(tokens)):
                if len(result) >= cap:
                    return result
                result.append(canonical_pair(tokens[i], tokens[j]))
        return result

    def probes(
        self,
        factory: str,
        pairs: Sequence[Pair],
        fee_tiers: Optional[Sequence[int]] = None,
    ) -> List[PoolProbe]:
        """Build one factory getPool call per (pair, fee)."""
        fees = tuple(fee_tiers) if fee_tiers is not None else self.fee_tiers
        return [
            PoolProbe(
                key=PoolKey(token0, token1, fee),
                call=get_pool_call(factory, token0, token1, fee),
            )
            for token0, token1 in pairs
            for fee in fees
        ]


def get_pool_call(factory: str, token_a: str, token_b: str, fee: int) -> LogicalCall:
    """Factory getPool call for a pool, with tokens in canonical order."""
    token0, token1 = canonical_pair(token_a, token_b)
    return LogicalCall(factory, FACTORY_ABI, "getPool", (token0, token1, fee))
