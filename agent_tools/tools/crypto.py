"""Cryptocurrency price tools backed by CoinGecko."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from agent_tools.analysis.price_formatting import format_compact_usd, format_price
from agent_tools.crypto_lookup import CryptoPriceLookup, get_price_lookup
from agent_tools.logging_config import tool_logging
from agent_tools.logging_utils import log_event
from agent_tools.replies import Reply
from agent_tools.types import CryptoComparison

logger = logging.getLogger(__name__)

crypto_tools = FastMCP("Crypto Price Tools")


def _failure(exc: Exception) -> Reply:
    log_event(logger, f"Crypto tool failed: {exc}", level=logging.ERROR, event="crypto_tool_error")
    return Reply.failure(f"Error: {exc}")


# Implementation functions
async def get_crypto_price_impl(lookup: CryptoPriceLookup, crypto_symbol: str) -> Reply:
    """Describe the current price of one coin."""
    try:
        quote = await lookup.fetch_quote(crypto_symbol)
    except Exception as exc:  # noqa: BLE001 - every failure becomes an error reply
        return _failure(exc)

    text = (
        f"Current price of {quote['name']} ({crypto_symbol}) is "
        f"${format_price(quote['price'])} {quote['currency']}.\n\n"
        f"Market Cap: {format_compact_usd(quote['marketCap'])}\n\n"
        f"{quote['description'] or ''}"
    )
    return Reply.success(text, data=quote)


async def compare_crypto_prices_impl(
    lookup: CryptoPriceLookup,
    crypto_symbol1: str,
    crypto_symbol2: str,
) -> Reply:
    """Compare two coins; both prices are fetched concurrently."""
    try:
        first, second = await lookup.fetch_quotes(crypto_symbol1, crypto_symbol2)
    except Exception as exc:  # noqa: BLE001
        return _failure(exc)

    if not first["price"] or not second["price"]:
        zero = first if not first["price"] else second
        return _failure(
            ValueError(f"Cannot compare prices: {zero['name']} ({zero['symbol']}) has no USD price")
        )

    ratio = first["price"] / second["price"]
    inverse_ratio = 1 / ratio

    text = (
        "Current price comparison:\n\n"
        f"{first['name']} ({crypto_symbol1}): ${format_price(first['price'])} {first['currency']}\n"
        f"{second['name']} ({crypto_symbol2}): ${format_price(second['price'])} {second['currency']}\n\n"
        f"1 {first['name']} = {ratio:.6f} {second['name']}\n"
        f"1 {second['name']} = {inverse_ratio:.6f} {first['name']}"
    )
    comparison: CryptoComparison = {
        "crypto1": first,
        "crypto2": second,
        "ratio": ratio,
        "inverseRatio": inverse_ratio,
    }
    return Reply.success(text, data=comparison)


# MCP tool wrappers
@crypto_tools.tool(
    name="getCryptoPrice",
    description="Get the current price of a cryptocurrency from CoinGecko",
)
@tool_logging("getCryptoPrice")
async def get_crypto_price(
    cryptoSymbol: Annotated[  # noqa: N803 - public parameter name
        str,
        Field(description="The symbol or name of the cryptocurrency (e.g., bitcoin, eth, solana)"),
    ],
) -> ToolResult:
    reply = await get_crypto_price_impl(get_price_lookup(), cryptoSymbol)
    return reply.to_tool_result()


@crypto_tools.tool(
    name="compareCryptoPrices",
    description="Compare the prices of two cryptocurrencies",
)
@tool_logging("compareCryptoPrices")
async def compare_crypto_prices(
    cryptoSymbol1: Annotated[  # noqa: N803
        str, Field(description="The symbol of the first cryptocurrency (e.g., bitcoin)")
    ],
    cryptoSymbol2: Annotated[  # noqa: N803
        str, Field(description="The symbol of the second cryptocurrency (e.g., ethereum)")
    ],
) -> ToolResult:
    reply = await compare_crypto_prices_impl(get_price_lookup(), cryptoSymbol1, cryptoSymbol2)
    return reply.to_tool_result()
