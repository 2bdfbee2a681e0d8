"""Tests for coin resolution and quote building."""

import asyncio
from datetime import UTC, datetime

import pytest

from agent_tools.analysis.coin_resolver import AliasTable, match_coin
from agent_tools.crypto_lookup import CryptoPriceLookup
from agent_tools.errors import NetworkError, NotFoundError, RemoteRejectedError

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def lookup(mock_coingecko_client):
    return CryptoPriceLookup(mock_coingecko_client, clock=lambda: FIXED_NOW)


class TestAliasResolution:
    """Common symbols and names resolve without downloading the catalog."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["btc", "bitcoin", "BTC", "  Bitcoin "])
    async def test_bitcoin_aliases(self, lookup, mock_coingecko_client, query):
        assert await lookup.resolve_coin_id(query) == "bitcoin"
        mock_coingecko_client.list_coins.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bnb_maps_to_binancecoin(self, lookup):
        assert await lookup.resolve_coin_id("BNB") == "binancecoin"

    def test_custom_alias_table_is_normalized(self):
        table = AliasTable({"WBTC": "wrapped-bitcoin"})

        assert table.lookup("wbtc") == "wrapped-bitcoin"
        assert table.lookup("btc") is None
        assert table.lookup(" WBtc ") == "wrapped-bitcoin"


class TestCatalogResolution:
    """Catalog search prefers id, then symbol, then name."""

    @pytest.mark.asyncio
    async def test_exact_id(self, lookup):
        assert await lookup.resolve_coin_id("shiba-inu") == "shiba-inu"

    @pytest.mark.asyncio
    async def test_symbol_case_insensitive(self, lookup):
        assert await lookup.resolve_coin_id("PEPE") == "pepe"

    @pytest.mark.asyncio
    async def test_symbol_beats_name(self, lookup):
        # "shib" is Shiba Inu's symbol and another coin's name.
        assert await lookup.resolve_coin_id("shib") == "shiba-inu"

    @pytest.mark.asyncio
    async def test_name_match(self, lookup):
        assert await lookup.resolve_coin_id("Shiba Inu") == "shiba-inu"

    @pytest.mark.asyncio
    async def test_unknown_names_original_input(self, lookup):
        with pytest.raises(NotFoundError) as exc_info:
            await lookup.resolve_coin_id("  NoSuchCoin ")

        assert "NoSuchCoin" in str(exc_info.value)

    def test_match_coin_first_entry_wins(self):
        catalog = [
            {"id": "a", "symbol": "dup", "name": "First"},
            {"id": "b", "symbol": "dup", "name": "Second"},
        ]

        assert match_coin("dup", catalog)["id"] == "a"

    def test_match_coin_skips_malformed_entries(self):
        catalog = ["garbage", {"id": "ok", "symbol": None, "name": "Fine"}]

        assert match_coin("fine", catalog)["id"] == "ok"


class TestFetchQuote:
    """Quotes carry price data and errors name the caller's input."""

    @pytest.mark.asyncio
    async def test_quote_fields(self, lookup, mock_coingecko_client):
        quote = await lookup.fetch_quote("BTC")

        assert quote == {
            "name": "Bitcoin",
            "symbol": "BTC",
            "price": 67_000.0,
            "currency": "USD",
            "marketCap": 1_330_000_000_000.0,
            "description": "Bitcoin is the first cryptocurrency.",
            "image": "https://assets.coingecko.test/bitcoin/large.png",
            "source": "CoinGecko",
            "fetchedAt": FIXED_NOW.isoformat(),
        }
        mock_coingecko_client.get_coin.assert_awaited_once_with("bitcoin")

    @pytest.mark.asyncio
    async def test_missing_description_falls_back(self, lookup):
        quote = await lookup.fetch_quote("eth")

        assert quote["description"] == "Ethereum price information"

    @pytest.mark.asyncio
    async def test_unknown_symbol_is_not_found(self, lookup):
        with pytest.raises(NotFoundError) as exc_info:
            await lookup.fetch_quote("Dogelonmars")

        message = str(exc_info.value)
        assert message.startswith("Failed to fetch price for Dogelonmars")
        assert "Could not find cryptocurrency with symbol: Dogelonmars" in message

    @pytest.mark.asyncio
    async def test_api_failure_keeps_kind_and_names_input(self, lookup, mock_coingecko_client):
        mock_coingecko_client.get_coin.side_effect = RemoteRejectedError(
            "CoinGecko API error: Too Many Requests", status_code=429
        )

        with pytest.raises(RemoteRejectedError) as exc_info:
            await lookup.fetch_quote("btc")

        assert exc_info.value.status_code == 429
        assert str(exc_info.value) == (
            "Failed to fetch price for btc: CoinGecko API error: Too Many Requests"
        )

    @pytest.mark.asyncio
    async def test_incomplete_market_data_is_network_error(self, lookup, mock_coingecko_client):
        mock_coingecko_client.get_coin.side_effect = None
        mock_coingecko_client.get_coin.return_value = {"name": "Bitcoin", "market_data": None}

        with pytest.raises(NetworkError, match="Failed to fetch price for bitcoin"):
            await lookup.fetch_quote("bitcoin")

    @pytest.mark.asyncio
    async def test_catalog_failure_is_wrapped(self, lookup, mock_coingecko_client):
        mock_coingecko_client.list_coins.side_effect = NetworkError("CoinGecko is unreachable")

        with pytest.raises(NetworkError, match="Failed to fetch price for pepe: CoinGecko is unreachable"):
            await lookup.fetch_quote("pepe")


class TestFetchQuotes:
    """Several quotes are fetched concurrently and fail together."""

    @pytest.mark.asyncio
    async def test_requests_overlap(self, mock_coingecko_client, coin_detail):
        in_flight = 0
        both_started = asyncio.Event()

        async def get_coin(coin_id: str):
            nonlocal in_flight
            in_flight += 1
            if in_flight == 2:
                both_started.set()
            # Would time out if the second request only started after this one.
            await asyncio.wait_for(both_started.wait(), timeout=1.0)
            return coin_detail(coin_id, coin_id.title(), 10.0)

        mock_coingecko_client.get_coin.side_effect = get_coin
        lookup = CryptoPriceLookup(mock_coingecko_client)

        first, second = await lookup.fetch_quotes("bitcoin", "ethereum")

        assert first["name"] == "Bitcoin"
        assert second["name"] == "Ethereum"

    @pytest.mark.asyncio
    async def test_any_failure_fails_all(self, lookup):
        with pytest.raises(NotFoundError, match="unknowncoin"):
            await lookup.fetch_quotes("bitcoin", "unknowncoin")
