"""Resolve user-supplied coin names and symbols to CoinGecko ids."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from agent_tools.types import CoinListEntry

# Common cryptocurrencies that skip the catalog download.
DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "bitcoin": "bitcoin",
        "btc": "bitcoin",
        "ethereum": "ethereum",
        "eth": "ethereum",
        "tether": "tether",
        "usdt": "tether",
        "bnb": "binancecoin",
        "solana": "solana",
        "sol": "solana",
        "xrp": "ripple",
        "dogecoin": "dogecoin",
        "doge": "dogecoin",
        "cardano": "cardano",
        "ada": "cardano",
        "polkadot": "polkadot",
        "dot": "polkadot",
    }
)


def normalize_query(value: str) -> str:
    """Lowercase and trim a coin query."""
    return value.strip().lower()


class AliasTable:
    """Read-only mapping from lowercase alias to canonical coin id."""

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        source = DEFAULT_ALIASES if aliases is None else aliases
        self._aliases: Mapping[str, str] = MappingProxyType(
            {normalize_query(alias): coin_id for alias, coin_id in source.items()}
        )

    def lookup(self, alias: str) -> str | None:
        """Return the canonical id for ``alias`` or ``None``."""
        return self._aliases.get(normalize_query(alias))


def match_coin(query: str, coins: Iterable[CoinListEntry]) -> CoinListEntry | None:
    """Find a catalog entry by exact id, then symbol, then name.

    ``query`` must already be normalized. Symbol and name comparisons ignore
    case; the first entry matching the highest-priority tier wins.
    """
    catalog = [coin for coin in coins if isinstance(coin, dict)]

    for coin in catalog:
        if coin.get("id") == query:
            return coin

    for coin in catalog:
        if (coin.get("symbol") or "").lower() == query:
            return coin

    for coin in catalog:
        if (coin.get("name") or "").lower() == query:
            return coin

    return None
