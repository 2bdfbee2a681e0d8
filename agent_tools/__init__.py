"""MCP tool servers exposing the GitHub and CoinGecko REST APIs to agents."""

__version__ = "1.0.0"
