"""
Tests for TokenRegistry loading and lookups.
"""

import json

import pytest

from ...conftest import CHAIN_ID, TKB, USDC, WETH
from ..registry import DEFAULT_DECIMALS, Token, TokenRegistry, TokenRegistryError


class TestTokenRegistryLoading:
    """Test building a registry from token lists."""

    def test_filters_other_chains(self, registry):
        """Test that only tokens for the active chain are kept."""
        assert len(registry) == 5
        assert all(t.chain_id == CHAIN_ID for t in registry)

    def test_addresses_lower_cased(self, registry):
        """Test that addresses are normalised on load."""
        for token in registry.tokens:
            assert token.address == token.address.lower()

    def test_keeps_list_order(self, registry):
        """Test that list order survives loading."""
        assert [t.symbol for t in registry][:2] == ["WETH", "USDC.e"]

    def test_bare_list_accepted(self, token_list):
        """Test that a bare list of tokens is accepted."""
        registry = TokenRegistry.from_token_list(token_list["tokens"], CHAIN_ID)
        assert len(registry) == 5

    def test_malformed_entries_skipped(self):
        """Test that bad entries are skipped instead of failing the load."""
        data = {
            "tokens": [
                {"chainId": CHAIN_ID, "address": "not-an-address", "symbol": "BAD", "decimals": 18},
                {"chainId": CHAIN_ID, "address": WETH, "symbol": "WETH"},
                {"chainId": CHAIN_ID, "address": USDC, "symbol": "USDC.e", "name": "USDC", "decimals": 6},
            ]
        }
        registry = TokenRegistry.from_token_list(data, CHAIN_ID)
        assert [t.symbol for t in registry] == ["USDC.e"]

    def test_duplicate_address_first_wins(self):
        """Test that a repeated address keeps the first entry."""
        data = [
            {"chainId": CHAIN_ID, "address": WETH, "symbol": "WETH", "name": "a", "decimals": 18},
            {"chainId": CHAIN_ID, "address": WETH, "symbol": "WETH2", "name": "b", "decimals": 6},
        ]
        registry = TokenRegistry.from_token_list(data, CHAIN_ID)
        assert len(registry) == 1
        assert registry.require(WETH).symbol == "WETH"

    def test_from_file(self, tmp_path, token_list):
        """Test loading a JSON token list from disk."""
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps(token_list))
        registry = TokenRegistry.from_file(path, CHAIN_ID)
        assert WETH in registry

    def test_from_missing_file_raises(self, tmp_path):
        """Test that an unreadable list raises TokenRegistryError."""
        with pytest.raises(TokenRegistryError):
            TokenRegistry.from_file(tmp_path / "missing.json", CHAIN_ID)

    def test_invalid_decimals_rejected(self):
        """Test that decimals outside 0-255 are rejected."""
        with pytest.raises(TokenRegistryError):
            Token.from_dict({"chainId": CHAIN_ID, "address": WETH, "decimals": 300})


class TestTokenRegistryLookups:
    """Test registry lookups."""

    def test_get_case_insensitive(self, registry):
        """Test that lookups ignore address case."""
        assert registry.get(USDC.upper().replace("0X", "0x")).symbol == "USDC.e"

    def test_require_unknown_raises(self, registry):
        """Test that require() raises for unknown tokens."""
        with pytest.raises(KeyError):
            registry.require("0x9999999999999999999999999999999999999999")

    def test_decimals_of_known_and_default(self, registry):
        """Test decimals lookups with the 18 default."""
        assert registry.decimals_of(TKB) == 8
        assert registry.decimals_of("0x9999999999999999999999999999999999999999") == DEFAULT_DECIMALS

    def test_by_symbol(self, registry):
        """Test case-insensitive symbol lookup."""
        assert registry.by_symbol("usdc.e").address == USDC
        assert registry.by_symbol("DAI") is None

    def test_registry_is_read_only(self, registry):
        """Test that the address index cannot be mutated."""
        with pytest.raises(TypeError):
            registry._by_address["0x0"] = None

    def test_token_to_dict(self, weth_token):
        """Test token metadata serialisation."""
        data = weth_token.to_dict()
        assert data["symbol"] == "WETH"
        assert data["decimals"] == 18
        assert data["address"] == WETH
