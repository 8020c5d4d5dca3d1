"""
Tests for pair and fee enumeration.
"""

import pytest

from ...conftest import FACTORY, TKA, TKB, TKC, USDC, WETH
from ..enumerator import PairFeeEnumerator, get_pool_call
from ..pool_types import FALLBACK_FEE_ORDER, PoolKey


class TestPairFeeEnumerator:
    """Test PairFeeEnumerator."""

    def test_token_addresses_dedup_and_cap(self):
        """Test lower-casing, first-occurrence de-duplication and the token cap."""
        enumerator = PairFeeEnumerator(max_tokens=3)
        tokens = [WETH, WETH.upper().replace("0X", "0x"), USDC, TKA, TKB]
        assert enumerator.token_addresses(tokens) == [WETH, USDC, TKA]

    def test_pairs_in_index_order(self):
        """Test that pairs follow (i < j) order and are canonical."""
        pairs = PairFeeEnumerator().pairs([TKB, TKA, TKC])
        assert pairs == [(TKA, TKB), (TKB, TKC), (TKA, TKC)]

    def test_pair_cap(self):
        """Test that pairs are capped at max_pairs."""
        tokens = [f"0x{i:040x}" for i in range(1, 11)]
        enumerator = PairFeeEnumerator(max_pairs=7)
        assert len(enumerator.pairs(tokens)) == 7
        assert len(enumerator.pairs(tokens, max_pairs=3)) == 3
        assert enumerator.pairs(tokens, max_pairs=3) == enumerator.pairs(tokens)[:3]

    @pytest.mark.parametrize("cap", [0, -1])
    def test_non_positive_pair_cap_rejected(self, cap):
        """Test that an explicit zero or negative cap is an error, not the default."""
        with pytest.raises(ValueError):
            PairFeeEnumerator().pairs([TKA, TKB, TKC], max_pairs=cap)

    def test_probes_pair_major_fee_minor(self):
        """Test probe ordering and the getPool call arguments."""
        enumerator = PairFeeEnumerator()
        probes = enumerator.probes(FACTORY, [(WETH, USDC), (TKA, TKB)])
        assert [p.key.fee for p in probes] == [100, 500, 3000, 10000] * 2
        assert probes[0].key == PoolKey(WETH, USDC, 100)
        assert probes[4].key == PoolKey(TKA, TKB, 100)
        assert probes[2].call.function_name == "getPool"
        assert probes[2].call.address == FACTORY
        assert probes[2].call.args == (WETH, USDC, 3000)

    def test_probes_custom_fee_order(self):
        """Test the fallback fee order override."""
        probes = PairFeeEnumerator().probes(FACTORY, [(WETH, USDC)], FALLBACK_FEE_ORDER)
        assert [p.key.fee for p in probes] == [3000, 500, 100, 10000]

    def test_deterministic(self):
        """Test that enumeration is identical across runs."""
        tokens = [WETH, USDC, TKA, TKB, TKC]
        first = PairFeeEnumerator().probes(FACTORY, PairFeeEnumerator().pairs(tokens))
        second = PairFeeEnumerator().probes(FACTORY, PairFeeEnumerator().pairs(tokens))
        assert [p.key for p in first] == [p.key for p in second]
        assert [p.call for p in first] == [p.call for p in second]

    def test_invalid_limits(self):
        """Test that non-positive caps are rejected."""
        with pytest.raises(ValueError):
            PairFeeEnumerator(max_tokens=0)

    def test_get_pool_call_canonicalises(self):
        """Test that getPool calls use canonical token order."""
        call = get_pool_call(FACTORY, USDC, WETH, 500)
        assert call.args == (WETH, USDC, 500)
