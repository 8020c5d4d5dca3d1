"""
Tests for pool keys and pool state serialisation.
"""

import pytest

from ...conftest import SQRT_PRICE_X96, USDC, WETH
from ..errors import InvalidPair
from ..pool_types import FEE_TICK_SPACING, FEE_TIERS, PoolKey, PoolState, canonical_pair, tick_spacing_for_fee


class TestCanonicalPair:
    """Test canonical token ordering."""

    def test_order_independent(self):
        """Test that argument order does not matter."""
        assert canonical_pair(WETH, USDC) == canonical_pair(USDC, WETH)

    def test_idempotent(self):
        """Test that canonicalising twice changes nothing."""
        pair = canonical_pair(USDC, WETH)
        assert canonical_pair(*pair) == pair

    def test_lower_cased_and_sorted(self):
        """Test that output is lower-cased with token0 < token1."""
        token0, token1 = canonical_pair(USDC.upper().replace("0X", "0x"), WETH)
        assert (token0, token1) == (WETH, USDC)
        assert token0 < token1

    def test_same_token_raises(self):
        """Test that pairing a token with itself raises, regardless of case."""
        with pytest.raises(InvalidPair):
            canonical_pair(WETH, WETH.upper().replace("0X", "0x"))

    def test_invalid_pair_is_value_error(self):
        """Test that InvalidPair can be caught as ValueError."""
        with pytest.raises(ValueError):
            canonical_pair(USDC, USDC)


class TestFeeTiers:
    """Test fee tier constants."""

    def test_default_spacings(self):
        """Test the factory default tick spacing per tier."""
        assert FEE_TIERS == (100, 500, 3000, 10000)
        assert [FEE_TICK_SPACING[f] for f in FEE_TIERS] == [1, 10, 60, 200]

    def test_unknown_fee_raises(self):
        """Test that an unsupported fee has no spacing."""
        with pytest.raises(InvalidPair):
            tick_spacing_for_fee(2500)


class TestPoolState:
    """Test PoolState behaviour and wire format."""

    def make_state(self, **overrides):
        fields = dict(
            pool_address="0x0000000000000000000000000000000000000b01",
            token0=WETH,
            token1=USDC,
            fee=3000,
            tick_spacing=60,
            liquidity=2**100,
            sqrt_price_x96=SQRT_PRICE_X96,
            tick=-200311,
        )
        fields.update(overrides)
        return PoolState(**fields)

    def test_initialized_follows_sqrt_price(self):
        """Test that initialized is derived from sqrt_price_x96 > 0."""
        assert self.make_state().initialized
        assert not self.make_state(sqrt_price_x96=0).initialized

    def test_to_dict_wire_format(self):
        """Test camelCase keys and big integers as decimal strings."""
        data = self.make_state().to_dict()
        assert data["pool"] == "0x0000000000000000000000000000000000000b01"
        assert data["tickSpacing"] == 60
        assert data["liquidity"] == str(2**100)
        assert data["sqrtPriceX96"] == str(SQRT_PRICE_X96)
        assert data["initialized"] is True
        assert "t0" not in data and "price" not in data

    def test_to_dict_decoration(self):
        """Test optional token metadata and price."""
        data = self.make_state().to_dict({"symbol": "WETH"}, {"symbol": "USDC.e"}, 2000.0)
        assert data["t0"] == {"symbol": "WETH"}
        assert data["t1"] == {"symbol": "USDC.e"}
        assert data["price"] == 2000.0

    def test_round_trip(self):
        """Test that from_dict restores a serialised state."""
        state = self.make_state()
        assert PoolState.from_dict(state.to_dict()) == state

    def test_frozen(self):
        """Test that states cannot be mutated in place."""
        state = self.make_state()
        with pytest.raises(AttributeError):
            state.liquidity = 0

    def test_key(self):
        """Test the canonical key of a state."""
        assert self.make_state().key == PoolKey(WETH, USDC, 3000)
        assert PoolKey.of(USDC, WETH, 3000) == PoolKey(WETH, USDC, 3000)
