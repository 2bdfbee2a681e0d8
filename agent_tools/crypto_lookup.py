"""Cryptocurrency price lookup against CoinGecko.

Resolution order for a user query:
1. Static alias table (``btc`` -> ``bitcoin``) without any network call
2. Full coin catalog, matched by exact id, then symbol, then name
3. Coin detail fetch for the resolved id
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from agent_tools.analysis.coin_resolver import AliasTable, match_coin, normalize_query
from agent_tools.coingecko_client import CoinGeckoClient, get_coingecko_client
from agent_tools.errors import ApiError, NetworkError, NotFoundError
from agent_tools.logging_utils import log_event
from agent_tools.types import CryptoQuote

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CryptoPriceLookup:
    """Builds ``CryptoQuote`` snapshots for user-supplied coin names or symbols."""

    def __init__(
        self,
        client: CoinGeckoClient,
        aliases: AliasTable | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.client = client
        self.aliases = aliases if aliases is not None else AliasTable()
        self.clock = clock

    async def resolve_coin_id(self, symbol_or_name: str) -> str:
        """Map a user query to CoinGecko's canonical coin id.

        Raises:
            NotFoundError: If neither the alias table nor the catalog matches.
            ApiError: If the catalog cannot be fetched.
        """
        query = normalize_query(symbol_or_name)

        coin_id = self.aliases.lookup(query)
        if coin_id is not None:
            log_event(
                logger,
                f"Using direct lookup for {query} -> {coin_id}",
                event="coin_alias_hit",
            )
            return coin_id

        log_event(logger, f"Performing search for {query}", event="coin_catalog_search")
        coins = await self.client.list_coins()
        if not isinstance(coins, list):
            raise NetworkError("CoinGecko returned an unexpected coin list")

        coin = match_coin(query, coins)
        if coin is None:
            raise NotFoundError(
                f"Could not find cryptocurrency with symbol: {symbol_or_name}"
            )

        log_event(
            logger,
            f"Found match for {query}: {coin['id']}",
            event="coin_catalog_match",
            result_count=len(coins),
        )
        return coin["id"]

    async def fetch_quote(self, symbol_or_name: str) -> CryptoQuote:
        """Fetch the current USD price snapshot for a coin.

        Every failure is re-raised as the same error kind with a message naming
        ``symbol_or_name`` exactly as the caller supplied it.
        """
        try:
            coin_id = await self.resolve_coin_id(symbol_or_name)
            coin = await self.client.get_coin(coin_id)
            return self._build_quote(symbol_or_name, coin)
        except ApiError as exc:
            log_event(
                logger,
                f"Error fetching price for {symbol_or_name}: {exc}",
                level=logging.ERROR,
                event="crypto_quote_error",
            )
            raise exc.with_context(f"Failed to fetch price for {symbol_or_name}") from exc

    async def fetch_quotes(self, *symbols: str) -> list[CryptoQuote]:
        """Fetch several quotes concurrently; any failure fails the whole call."""
        return list(await asyncio.gather(*(self.fetch_quote(symbol) for symbol in symbols)))

    def _build_quote(self, symbol: str, coin: dict[str, Any]) -> CryptoQuote:
        try:
            market_data = coin["market_data"]
            price = market_data["current_price"]["usd"]
            name = coin["name"]
            market_cap = (market_data.get("market_cap") or {}).get("usd")
            description_en = (coin.get("description") or {}).get("en")
            image = (coin.get("image") or {}).get("large")
            price_value = float(price)
            market_cap_value = float(market_cap) if market_cap is not None else None
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise NetworkError(f"CoinGecko returned incomplete market data ({exc!r})") from exc

        if description_en:
            description = description_en.split("\n")[0]
        else:
            description = f"{name} price information"

        return {
            "name": name,
            "symbol": symbol,
            "price": price_value,
            "currency": "USD",
            "marketCap": market_cap_value,
            "description": description,
            "image": image,
            "source": "CoinGecko",
            "fetchedAt": self.clock().isoformat(),
        }


# Process-wide lookup instance
_lookup: CryptoPriceLookup | None = None


def get_price_lookup() -> CryptoPriceLookup:
    """Get or create the process-wide price lookup."""
    global _lookup
    if _lookup is None:
        _lookup = CryptoPriceLookup(get_coingecko_client())
    return _lookup
