"""Client for the public CoinGecko market-data API."""

from typing import Any

import httpx

from agent_tools.config import Settings, get_settings
from agent_tools.http_client import ApiClient
from agent_tools.types import CoinListEntry

COIN_DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "false",
    "developer_data": "false",
}


class CoinGeckoClient(ApiClient):
    """Client for CoinGecko API access (unauthenticated)."""

    service_name = "CoinGecko"

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        super().__init__(
            self.settings.coingecko_base_url,
            headers={"Accept": "application/json"},
            timeout=self.settings.coingecko_timeout,
            retry_attempts=self.settings.http_retry_attempts,
            retry_backoff=self.settings.http_retry_backoff,
            transport=transport,
        )

    async def list_coins(self) -> list[CoinListEntry]:
        """Fetch the full id/symbol/name catalog."""
        return await self._request("GET", "coins/list", event="coingecko_coins_list")

    async def get_coin(self, coin_id: str) -> dict[str, Any]:
        """Fetch market data, description and images for one coin."""
        return await self._request(
            "GET",
            f"coins/{coin_id}",
            event="coingecko_coin_detail",
            params=dict(COIN_DETAIL_PARAMS),
        )

    def _error_message(self, response: httpx.Response, payload: dict[str, Any]) -> str:
        detail = payload.get("error")
        status = payload.get("status")
        if not detail and isinstance(status, dict):
            detail = status.get("error_message")
        if not isinstance(detail, str) or not detail:
            detail = response.reason_phrase or f"HTTP {response.status_code}"
        return f"CoinGecko API error: {detail}"


# Process-wide client instance
_client: CoinGeckoClient | None = None


def get_coingecko_client(settings: Settings | None = None) -> CoinGeckoClient:
    """Get or create the process-wide CoinGecko client."""
    global _client
    if _client is None:
        _client = CoinGeckoClient(settings)
    return _client
