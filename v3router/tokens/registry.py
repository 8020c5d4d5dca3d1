"""
Token registry.

Loads a token list once, keeps only entries for the active chain and
exposes them keyed by lower-cased address. The registry is immutable after
construction and is passed explicitly into discovery and routing.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from eth_utils import is_address

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18


class TokenRegistryError(Exception):
    """Raised when a token list cannot be loaded."""
    pass


@dataclass(frozen=True)
class Token:
    """
    ERC-20 token metadata.

    Attributes:
        address: Lower-cased token address
        chain_id: Chain the token lives on
        decimals: Token decimals (0-255)
        symbol: Ticker symbol
        name: Display name
        logo_uri: Optional logo URL from the token list
    """

    address: str
    chain_id: int
    decimals: int
    symbol: str
    name: str
    logo_uri: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Token":
        address = str(data["address"])
        if not is_address(address):
            raise TokenRegistryError(f"Invalid token address: {address}")
        decimals = int(data["decimals"])
        if not 0 <= decimals <= 255:
            raise TokenRegistryError(f"Invalid decimals for {address}: {decimals}")
        return cls(
            address=address.lower(),
            chain_id=int(data["chainId"]),
            decimals=decimals,
            symbol=str(data.get("symbol", "")),
            name=str(data.get("name", "")),
            logo_uri=data.get("logoURI"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "logoURI": self.logo_uri,
        }


class TokenRegistry:
    """Immutable lookup of tokens for one chain."""

    def __init__(self, tokens: Iterable[Token], chain_id: int):
        self.chain_id = chain_id
        ordered: List[Token] = []
        by_address: Dict[str, Token] = {}
        for token in tokens:
            if token.chain_id != chain_id:
                continue
            if token.address in by_address:
                # First entry wins, matching list order
                continue
            by_address[token.address] = token
            ordered.append(token)
        self._tokens: Tuple[Token, ...] = tuple(ordered)
        self._by_address = MappingProxyType(by_address)

    @classmethod
    def from_token_list(cls, data: Union[Mapping[str, Any], List[Any]], chain_id: int) -> "TokenRegistry":
        """
        Build a registry from a parsed token list.

        Args:
            data: Either ``{"tokens": [...]}`` or a bare list of token dicts
            chain_id: Active chain; entries for other chains are ignored

        Returns:
            TokenRegistry for chain_id
        """
        entries = data.get("tokens", []) if isinstance(data, Mapping) else data
        tokens = []
        for entry in entries:
            try:
                tokens.append(Token.from_dict(entry))
            except (KeyError, TypeError, ValueError, TokenRegistryError) as e:
                logger.warning(f"Skipping malformed token list entry {entry!r}: {e}")
        registry = cls(tokens, chain_id)
        logger.info(f"Loaded {len(registry)} tokens for chain {chain_id}")
        return registry

    @classmethod
    def from_file(cls, path: Union[str, Path], chain_id: int) -> "TokenRegistry":
        """Load a JSON token list from disk."""
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TokenRegistryError(f"Failed to load token list {path}: {e}")
        return cls.from_token_list(data, chain_id)

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    def get(self, address: str) -> Optional[Token]:
        return self._by_address.get(address.lower())

    def require(self, address: str) -> Token:
        token = self.get(address)
        if token is None:
            raise KeyError(f"Unknown token {address} on chain {self.chain_id}")
        return token

    def decimals_of(self, address: str, default: int = DEFAULT_DECIMALS) -> int:
        """Decimals for address, or default for tokens missing from the list."""
        token = self.get(address)
        return token.decimals if token else default

    def by_symbol(self, symbol: str) -> Optional[Token]:
        """First token whose symbol matches case-insensitively."""
        wanted = symbol.lower()
        for token in self._tokens:
            if token.symbol.lower() == wanted:
                return token
        return None

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._by_address

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)
