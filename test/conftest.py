import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from v3router.cli import Services
from v3router.tokens.registry import TokenRegistry

CHAIN_ID = 43111
WETH = "0x4200000000000000000000000000000000000006"
USDC = "0xad11a8beb98bbf61dbb1aa0f6d6f2ecd87b35afa"

TOKEN_LIST = [
    {"chainId": CHAIN_ID, "address": WETH, "symbol": "WETH", "name": "Wrapped Ether", "decimals": 18},
    {"chainId": CHAIN_ID, "address": USDC, "symbol": "USDC.e", "name": "Bridged USDC", "decimals": 6},
]


@pytest.fixture
def config():
    config = MagicMock()
    config.protocols.DEFAULT_SLIPPAGE_BPS = 50
    return config


@pytest.fixture
def services():
    discovery = MagicMock()
    discovery.discover_pools = AsyncMock(return_value=[])
    discovery.diagnose = AsyncMock()
    selector = MagicMock()
    selector.select_route = AsyncMock()
    calculator = MagicMock()
    calculator.quote = AsyncMock()
    calculator.quote_swap = AsyncMock()
    calculator.best_fee_by_quote = AsyncMock()
    return Services(
        registry=TokenRegistry.from_token_list(TOKEN_LIST, CHAIN_ID),
        discovery=discovery,
        selector=selector,
        calculator=calculator,
    )


@pytest.fixture
def out():
    return io.StringIO()
