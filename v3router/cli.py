#!/usr/bin/env python3
"""
Command-line interface for pool discovery, routing and quoting.

Usage:
    v3router pools
    v3router pools --stream
    v3router route WETH USDC.e
    v3router quote WETH USDC.e 1.5 --slippage-bps 30
    v3router range --spacing 60 --tick 200311 --pct 5

Exit codes: 0 on success (including a null quote for an empty or
non-positive amount), 1 for routing, pool or stream errors, 2 for
configuration, token or range errors, 130 when interrupted.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Any, List, Optional, TextIO

from eth_utils import is_address

from .batchers.base import BatchConfig
from .batchers.probe import ProbeEngine
from .chain.reader import Web3ChainReader
from .config import ConfigError, ConfigManager
from .core.storage import RedisStorage, StorageError
from .pools.discovery import DiscoveryConfig, PoolDiscoveryService
from .pools.errors import PoolError
from .pools.v3_math import (
    full_range_ticks,
    sqrt_price_x96_at_tick,
    ticks_from_percent_band,
    validate_tick_range,
)
from .routing.errors import RoutingError
from .routing.quoter import QuoteCalculator
from .routing.router import RouteSelector
from .routing.types import Route
from .tokens.registry import TokenRegistry, TokenRegistryError
from .utils.json_helpers import dumps, ndjson_line

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Wired-up components for one CLI invocation."""

    registry: TokenRegistry
    discovery: PoolDiscoveryService
    selector: RouteSelector
    calculator: QuoteCalculator
    cache: Optional[RedisStorage] = None

    async def close(self) -> None:
        if self.cache is not None:
            await self.cache.disconnect()


async def connect_cache(config: ConfigManager) -> Optional[RedisStorage]:
    """Redis cache when enabled; unreachable Redis downgrades to no cache."""
    if not config.cache.CACHE_ENABLED:
        return None
    cache = RedisStorage(config.cache.get_redis_connection_kwargs())
    try:
        await cache.connect()
    except StorageError as e:
        logger.warning(f"Continuing without pool cache: {e}")
        return None
    return cache


async def build_services(config: ConfigManager) -> Services:
    """Validate configuration and build reader, registry and services."""
    config.validate_configuration()

    chains = config.chains
    protocols = config.protocols

    reader = Web3ChainReader.from_rpc_url(
        chains.require_rpc_url(), chains.multicall_address, chains.RPC_TIMEOUT
    )
    registry = TokenRegistry.from_file(protocols.require_token_list(), chains.require_chain_id())
    engine = ProbeEngine(
        reader,
        BatchConfig(
            batch_size=protocols.STATE_CHUNK_SIZE,
            max_retries=chains.RPC_MAX_RETRIES,
            retry_delay=chains.RPC_RETRY_DELAY,
        ),
    )
    cache = await connect_cache(config)

    discovery = PoolDiscoveryService(
        reader,
        registry,
        protocols.require_factory(),
        engine=engine,
        cache=cache,
        config=DiscoveryConfig.from_config(config),
        chain_id=chains.CHAIN_ID,
    )
    selector = RouteSelector(discovery, protocols.WRAPPED_NATIVE, protocols.FEE_TIERS)
    calculator = QuoteCalculator(reader, protocols.require_quoter(), registry, discovery, engine)
    return Services(registry, discovery, selector, calculator, cache)


def resolve_token(registry: TokenRegistry, value: str) -> str:
    """Accept a token address or a symbol from the token list."""
    if is_address(value):
        return value.lower()
    token = registry.by_symbol(value)
    if token is None:
        raise TokenRegistryError(f"Unknown token symbol {value!r}")
    return token.address


def write_json(data: Any, out: TextIO) -> None:
    out.write(dumps(data, compact=False) + "\n")


async def cmd_pools(args, services: Services, out: TextIO) -> int:
    discovery = services.discovery
    if args.debug:
        write_json(await discovery.diagnose(), out)
        return 0

    if args.stream:
        failed = False
        async for record in discovery.stream_pools():
            out.write(ndjson_line(record))
            out.flush()
            failed = failed or record["type"] == "error"
        return 1 if failed else 0

    states = await discovery.discover_pools(refresh=args.refresh)
    write_json([discovery.pool_record(state) for state in states], out)
    return 0


async def cmd_route(args, services: Services, out: TextIO) -> int:
    token_in = resolve_token(services.registry, args.token_in)
    token_out = resolve_token(services.registry, args.token_out)
    route = await services.selector.select_route(token_in, token_out)
    write_json(route.to_dict(), out)
    return 0


async def cmd_quote(args, services: Services, out: TextIO) -> int:
    """Print a quote, or null while the amount is empty or not positive."""
    token_in = resolve_token(services.registry, args.token_in)
    token_out = resolve_token(services.registry, args.token_out)
    calculator = services.calculator

    if args.auto_fee:
        fee = await calculator.best_fee_by_quote(token_in, token_out, args.amount)
        if fee is None:
            write_json(None, out)
            return 0
        route = Route((token_in, token_out), (fee,))
        quote = await calculator.quote(route, args.amount, args.slippage_bps)
        write_json(quote.to_dict() if quote else None, out)
        return 0

    result = await calculator.quote_swap(
        services.selector, token_in, token_out, args.amount, args.slippage_bps
    )
    write_json(result, out)
    return 0


def cmd_range(args, out: TextIO) -> int:
    if args.full:
        lower, upper = full_range_ticks(args.spacing)
    else:
        lower, upper = ticks_from_percent_band(args.tick, args.spacing, args.pct)
    validate_tick_range(lower, upper, args.spacing)
    write_json(
        {
            "tickLower": lower,
            "tickUpper": upper,
            "spacing": args.spacing,
            "sqrtPriceX96Lower": str(sqrt_price_x96_at_tick(lower)),
            "sqrtPriceX96Upper": str(sqrt_price_x96_at_tick(upper)),
        },
        out,
    )
    return 0


def build_parser(default_slippage_bps: int = 50) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="v3router",
        description="Uniswap V3 pool discovery, swap routing and quoting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Buffered scan (cached when CACHE_ENABLED=true)
  v3router pools

  # Incremental NDJSON output
  v3router pools --stream

  # Best route and a quote with 0.3% slippage tolerance
  v3router route WETH USDC.e
  v3router quote WETH USDC.e 1.5 --slippage-bps 30

  # Aligned tick range for a 0.3% pool
  v3router range --spacing 60 --full
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pools = subparsers.add_parser("pools", help="Discover pools for the token list")
    pools.add_argument("--stream", action="store_true", help="Emit NDJSON records as pools are found")
    pools.add_argument("--refresh", action="store_true", help="Ignore cached results")
    pools.add_argument("--debug", action="store_true", help="Print scan diagnostics instead of pools")

    route = subparsers.add_parser("route", help="Select a swap route")
    route.add_argument("token_in", help="Input token address or symbol")
    route.add_argument("token_out", help="Output token address or symbol")

    quote = subparsers.add_parser("quote", help="Quote a swap")
    quote.add_argument("token_in", help="Input token address or symbol")
    quote.add_argument("token_out", help="Output token address or symbol")
    quote.add_argument("amount", help="Human input amount, e.g. 1.5")
    quote.add_argument(
        "--slippage-bps",
        type=int,
        default=default_slippage_bps,
        help=f"Slippage tolerance in basis points (default: {default_slippage_bps})",
    )
    quote.add_argument(
        "--auto-fee",
        action="store_true",
        help="Quote the direct pool whose fee tier gives the best output",
    )

    ticks = subparsers.add_parser("range", help="Compute an aligned tick range")
    ticks.add_argument("--spacing", type=int, required=True, help="Pool tick spacing")
    band = ticks.add_mutually_exclusive_group(required=True)
    band.add_argument("--full", action="store_true", help="Full range")
    band.add_argument("--pct", type=float, help="Band half-width in percent around --tick")
    ticks.add_argument("--tick", type=int, help="Current pool tick (with --pct)")

    return parser


async def main(
    argv: Optional[List[str]] = None,
    config: Optional[ConfigManager] = None,
    out: TextIO = sys.stdout,
) -> int:
    """Main CLI function; returns the process exit code."""
    if config is None:
        # Validated in build_services(); `range` needs no chain settings
        try:
            config = ConfigManager()
        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            return 2
    parser = build_parser(config.protocols.DEFAULT_SLIPPAGE_BPS)
    args = parser.parse_args(argv)

    if args.command == "range":
        if args.pct is not None and args.tick is None:
            parser.error("--pct requires --tick")
        try:
            return cmd_range(args, out)
        except PoolError as e:
            logger.error(f"Invalid range: {e}")
            return 2

    services = None
    try:
        services = await build_services(config)
        handler = {"pools": cmd_pools, "route": cmd_route, "quote": cmd_quote}[args.command]
        return await handler(args, services, out)
    except (ConfigError, TokenRegistryError) as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except (RoutingError, PoolError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        if services is not None:
            await services.close()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
