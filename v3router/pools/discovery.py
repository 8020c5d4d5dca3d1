"""
Pool discovery.

Finds every existing pool among the enumerated (pair, fee) candidates and
reads its state. Three modes share the same primitives:

- discover_pools(): buffered scan, optionally cached
- stream_pools() / stream_ndjson(): per-chunk incremental output
- get_pool_address() / get_liquidity() / get_pool_state(): single-pool reads
  used by routing and quoting

When the first existence pass finds nothing (usually a broken aggregated
read path), one reduced scan with independent reads runs before concluding
that no pools exist.
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from ..batchers.base import unwrap_address, unwrap_int
from ..batchers.probe import ProbeEngine
from ..chain.abis import POOL_ABI
from ..chain.reader import ChainReader
from ..chain.types import Failure, LogicalCall, ProbeResult
from ..core.storage.base import CacheInterface
from ..tokens.registry import TokenRegistry
from ..utils.json_helpers import ndjson_line
from .enumerator import Pair, PairFeeEnumerator, get_pool_call
from .pool_types import (
    FALLBACK_FEE_ORDER,
    FEE_TICK_SPACING,
    FEE_TIERS,
    PoolKey,
    PoolProbe,
    PoolState,
)
from .v3_math import price_from_sqrt_price_x96

logger = logging.getLogger(__name__)

FoundPool = Tuple[PoolKey, str]

STATE_FUNCTIONS = ("slot0", "liquidity", "tickSpacing")


@dataclass
class DiscoveryConfig:
    """Scan bounds, chunk sizes and cache settings for pool discovery."""

    max_tokens: int = 120
    max_pairs: int = 4000
    fallback_max_pairs: int = 1500
    existence_chunk_size: int = 200
    state_chunk_size: int = 150
    stream_pair_chunk: int = 50
    pools_cache_ttl: int = 3600
    empty_pools_cache_ttl: int = 300
    cache_key_prefix: str = "pools:v2"
    fee_tiers: Tuple[int, ...] = FEE_TIERS

    def __post_init__(self):
        for name in (
            "max_tokens",
            "max_pairs",
            "fallback_max_pairs",
            "existence_chunk_size",
            "state_chunk_size",
            "stream_pair_chunk",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_config(cls, config) -> "DiscoveryConfig":
        """Build from a ConfigManager."""
        protocols = config.protocols
        cache = config.cache
        return cls(
            max_tokens=protocols.MAX_TOKENS,
            max_pairs=protocols.MAX_PAIRS,
            fallback_max_pairs=protocols.FALLBACK_MAX_PAIRS,
            existence_chunk_size=protocols.EXISTENCE_CHUNK_SIZE,
            state_chunk_size=protocols.STATE_CHUNK_SIZE,
            stream_pair_chunk=protocols.STREAM_PAIR_CHUNK,
            pools_cache_ttl=cache.POOLS_CACHE_TTL,
            empty_pools_cache_ttl=cache.EMPTY_POOLS_CACHE_TTL,
            cache_key_prefix=f"pools:{cache.POOLS_KEY_VERSION}",
            fee_tiers=tuple(protocols.FEE_TIERS),
        )


def state_calls(pool_address: str) -> List[LogicalCall]:
    """slot0, liquidity and tickSpacing reads for one pool, in that order."""
    return [LogicalCall(pool_address, POOL_ABI, name) for name in STATE_FUNCTIONS]


def assemble_state(key: PoolKey, pool_address: str, results: Sequence[ProbeResult]) -> Optional[PoolState]:
    """
    Build a PoolState from the three state reads of a pool.

    Missing fields default (liquidity 0, tick spacing from the fee tier,
    sqrtPriceX96 0 meaning uninitialised). Returns None when all three reads
    failed.
    """
    slot0, liquidity, spacing = results
    if all(isinstance(r, Failure) for r in results):
        return None

    tick_spacing = unwrap_int(spacing)
    if not tick_spacing or tick_spacing <= 0:
        tick_spacing = FEE_TICK_SPACING.get(key.fee, 1)

    return PoolState(
        pool_address=pool_address,
        token0=key.token0,
        token1=key.token1,
        fee=key.fee,
        tick_spacing=tick_spacing,
        liquidity=unwrap_int(liquidity) or 0,
        sqrt_price_x96=unwrap_int(slot0, 0) or 0,
        tick=unwrap_int(slot0, 1) or 0,
    )


class PoolDiscoveryService:
    """
    Discovers pools for the registry's tokens against one factory.

    Args:
        reader: Chain read client
        registry: Tokens to pair up (order defines enumeration order)
        factory_address: Pool factory
        engine: Probe engine (built over reader when omitted)
        enumerator: Pair/fee enumerator (built from config when omitted)
        cache: Optional cache for buffered scans
        config: Discovery settings
        chain_id: Chain id for cache keys (defaults to the registry's)
    """

    def __init__(
        self,
        reader: ChainReader,
        registry: TokenRegistry,
        factory_address: str,
        engine: Optional[ProbeEngine] = None,
        enumerator: Optional[PairFeeEnumerator] = None,
        cache: Optional[CacheInterface] = None,
        config: Optional[DiscoveryConfig] = None,
        chain_id: Optional[int] = None,
    ):
        self.reader = reader
        self.registry = registry
        self.factory_address = factory_address.lower()
        self.config = config or DiscoveryConfig()
        self.engine = engine or ProbeEngine(reader)
        self.enumerator = enumerator or PairFeeEnumerator(
            max_tokens=self.config.max_tokens,
            max_pairs=self.config.max_pairs,
            fee_tiers=self.config.fee_tiers,
        )
        self.cache = cache
        self.chain_id = registry.chain_id if chain_id is None else chain_id

    @property
    def cache_key(self) -> str:
        return f"{self.config.cache_key_prefix}:{self.chain_id}"

    def candidate_pairs(self) -> Tuple[List[str], List[Pair]]:
        """Capped token addresses and the pairs built from them."""
        tokens = self.enumerator.token_addresses(t.address for t in self.registry)
        return tokens, self.enumerator.pairs(tokens)

    # Buffered mode

    async def discover_pools(self, refresh: bool = False) -> List[PoolState]:
        """
        Scan all candidate pools and read their state.

        Args:
            refresh: Skip the cache read (the result is still written back)

        Returns:
            PoolState per discovered pool, in enumeration order
        """
        if self.cache is not None and not refresh:
            cached = await self._cache_get()
            if cached is not None:
                logger.info(f"Loaded {len(cached)} pools from cache {self.cache_key}")
                return cached

        tokens, pairs = self.candidate_pairs()
        logger.info(f"Scanning {len(pairs)} pairs from {len(tokens)} tokens")

        found = await self._probe_existence(self.enumerator.probes(self.factory_address, pairs))
        if not found:
            found = await self._fallback_scan(pairs)

        states = await self.fetch_pool_states(found) if found else []
        logger.info(f"Discovered {len(states)} pools ({len(found)} addresses found)")

        await self._cache_set(states)
        return states

    async def fetch_pool_states(self, found: Sequence[FoundPool]) -> List[PoolState]:
        """Read slot0/liquidity/tickSpacing for each found pool."""
        calls = [call for _, address in found for call in state_calls(address)]
        results = await self.engine.probe(calls, chunk_size=self.config.state_chunk_size)

        states = []
        for i, (key, address) in enumerate(found):
            state = assemble_state(key, address, results[3 * i : 3 * i + 3])
            if state is None:
                logger.debug(f"Skipping pool {address}: all state reads failed")
                continue
            states.append(state)
        return states

    async def _probe_existence(
        self, probes: Sequence[PoolProbe], independent: bool = False
    ) -> List[FoundPool]:
        calls = [p.call for p in probes]
        chunk_size = self.config.existence_chunk_size
        if independent:
            results = await self.engine.probe_independent(calls, chunk_size=chunk_size)
        else:
            results = await self.engine.probe(calls, chunk_size=chunk_size)

        found = []
        for probe, result in zip(probes, results):
            address = unwrap_address(result)
            if address:
                found.append((probe.key, address))
        return found

    async def _fallback_scan(self, pairs: Sequence[Pair]) -> List[FoundPool]:
        """Reduced scan with independent reads, most common fee tiers first."""
        reduced = list(pairs[: self.config.fallback_max_pairs])
        logger.warning(
            f"No pools found in first pass; retrying {len(reduced)} pairs with independent reads"
        )
        fees = [fee for fee in FALLBACK_FEE_ORDER if fee in self.config.fee_tiers]
        probes = self.enumerator.probes(self.factory_address, reduced, fees)
        found = await self._probe_existence(probes, independent=True)
        if not found:
            logger.warning("Fallback scan found no pools")
        return found

    # Cache

    async def _cache_get(self) -> Optional[List[PoolState]]:
        try:
            cached = await self.cache.get(self.cache_key)
            if cached is None:
                return None
            if not isinstance(cached, list):
                logger.warning(f"Ignoring malformed cache entry {self.cache_key}")
                return None
            return [PoolState.from_dict(item) for item in cached]
        except Exception as e:
            logger.warning(f"Pool cache read failed for {self.cache_key}: {e}")
            return None

    async def _cache_set(self, states: Sequence[PoolState]) -> None:
        if self.cache is None:
            return
        ttl = self.config.pools_cache_ttl if states else self.config.empty_pools_cache_ttl
        try:
            await self.cache.set(self.cache_key, [s.to_dict() for s in states], ttl)
        except Exception as e:
            logger.warning(f"Pool cache write failed for {self.cache_key}: {e}")

    # Streaming mode

    async def stream_pools(self) -> AsyncIterator[Dict[str, Any]]:
        """
        Yield pool records chunk by chunk, then a summary record.

        Records are ``{"type": "pool", ...}`` per pool and a final
        ``{"type": "summary", "poolsEmitted": n}``. An unexpected error yields
        ``{"type": "error", "error": message}`` and ends the stream; records
        already yielded stand.
        """
        emitted = 0
        try:
            tokens, pairs = self.candidate_pairs()
            logger.info(f"Streaming scan of {len(pairs)} pairs from {len(tokens)} tokens")

            any_found = False
            step = self.config.stream_pair_chunk
            for start in range(0, len(pairs), step):
                probes = self.enumerator.probes(self.factory_address, pairs[start : start + step])
                found = await self._probe_existence(probes)
                if not found:
                    continue
                any_found = True
                for state in await self.fetch_pool_states(found):
                    yield self.pool_record(state)
                    emitted += 1

            if not any_found:
                found = await self._fallback_scan(pairs)
                for start in range(0, len(found), step):
                    for state in await self.fetch_pool_states(found[start : start + step]):
                        yield self.pool_record(state)
                        emitted += 1
        except Exception as e:
            logger.exception(f"Pool stream failed after {emitted} pools")
            yield {"type": "error", "error": str(e) or type(e).__name__}
            return

        logger.info(f"Pool stream finished: {emitted} pools emitted")
        yield {"type": "summary", "poolsEmitted": emitted}

    async def stream_ndjson(self) -> AsyncIterator[str]:
        """stream_pools() encoded as newline-terminated JSON lines."""
        async for record in self.stream_pools():
            yield ndjson_line(record)

    def pool_record(self, state: PoolState) -> Dict[str, Any]:
        """Wire record for a pool, decorated with token metadata and price when known."""
        token0 = self.registry.get(state.token0)
        token1 = self.registry.get(state.token1)
        price = None
        if state.initialized:
            price = price_from_sqrt_price_x96(
                state.sqrt_price_x96,
                self.registry.decimals_of(state.token0),
                self.registry.decimals_of(state.token1),
            )
        record = {"type": "pool"}
        record.update(
            state.to_dict(
                token0.to_dict() if token0 else None,
                token1.to_dict() if token1 else None,
                price,
            )
        )
        return record

    # Single-pool primitives

    async def get_pool_address(self, token_a: str, token_b: str, fee: int) -> Optional[str]:
        """Pool address for (token_a, token_b, fee), or None when it does not exist."""
        result = await self.engine.read_one(get_pool_call(self.factory_address, token_a, token_b, fee))
        return unwrap_address(result)

    async def get_liquidity(self, pool_address: str) -> int:
        """In-range liquidity of a pool; 0 when the read fails."""
        result = await self.engine.read_one(LogicalCall(pool_address, POOL_ABI, "liquidity"))
        return unwrap_int(result) or 0

    async def get_pool_state(self, token_a: str, token_b: str, fee: int) -> Optional[PoolState]:
        key = PoolKey.of(token_a, token_b, fee)
        address = await self.get_pool_address(key.token0, key.token1, fee)
        if address is None:
            return None
        states = await self.fetch_pool_states([(key, address)])
        return states[0] if states else None

    # Diagnostics

    async def diagnose(self) -> Dict[str, Any]:
        """
        Scan without caching and report what was tried.

        Returns:
            ``{tokens, pairsTried, poolsFound, sampleDiag}`` where sampleDiag
            is a direct WETH/USDC getPool read at the 0.3% tier
        """
        tokens, pairs = self.candidate_pairs()
        found = await self._probe_existence(self.enumerator.probes(self.factory_address, pairs))
        if not found:
            found = await self._fallback_scan(pairs)
        return {
            "tokens": len(tokens),
            "pairsTried": len(pairs),
            "poolsFound": len(found),
            "sampleDiag": await self._sample_diag(),
        }

    async def _sample_diag(self) -> Dict[str, Any]:
        weth = self.registry.by_symbol("WETH")
        usdc = self.registry.by_symbol("USDC.e") or self.registry.by_symbol("USDC")
        if weth is None or usdc is None:
            return {"note": "No WETH/USDC in token list for this chain."}

        result = await self.engine.read_one(
            get_pool_call(self.factory_address, weth.address, usdc.address, 3000)
        )
        if isinstance(result, Failure):
            return {"error": result.reason}
        return {
            "pair": {"weth": weth.address, "usdc": usdc.address, "fee": 3000},
            "pool": unwrap_address(result),
        }
