"""MCP tool modules for the GitHub and crypto servers."""
