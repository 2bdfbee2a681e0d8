"""Crypto price MCP server.

Serves CoinGecko price lookups over the MCP stdio transport. Diagnostics go
to a log file that is truncated on every start.
"""

import asyncio
import logging

from fastmcp import FastMCP

from agent_tools.coingecko_client import get_coingecko_client
from agent_tools.config import get_settings
from agent_tools.logging_utils import log_event
from agent_tools.tools.crypto import crypto_tools

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="CryptoPrice",
    instructions="A server that fetches cryptocurrency prices from CoinGecko.",
)


async def setup() -> None:
    """Set up the server by importing the crypto price tools."""
    await mcp.import_server(crypto_tools)
    log_event(logger, "Imported crypto price tools", tool_name="server", event="server_setup")


async def main() -> None:
    """Run the crypto price MCP server on stdio."""
    settings = get_settings()
    settings.configure_logging(log_file=settings.crypto_log_file)

    await setup()
    client = get_coingecko_client(settings)
    log_event(logger, "Crypto Price MCP Server is running...", tool_name="server", event="server_start")

    try:
        await mcp.run_async(transport="stdio")
    except Exception as e:
        logger.error(f"Failed to start Crypto Price MCP Server: {e}")
        raise
    finally:
        await client.close()


def cli() -> None:
    """CLI entry point for the crypto-tools-mcp command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
