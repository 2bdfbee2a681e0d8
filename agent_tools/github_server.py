"""GitHub MCP server.

Exposes repository, branch and pull-request operations of the GitHub REST
API over the MCP stdio transport. Requires ``GITHUB_TOKEN``.
"""

import asyncio
import logging

from fastmcp import FastMCP

from agent_tools.config import get_settings
from agent_tools.errors import ConfigurationError
from agent_tools.github_client import get_github_client
from agent_tools.logging_utils import log_event
from agent_tools.tools.github import github_tools

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="GitHub Actions",
    instructions=(
        "Create GitHub repositories, branches and pull requests, merge pull requests, "
        "and list repositories and branches for the authenticated user."
    ),
)


async def setup() -> None:
    """Set up the server by importing the GitHub tools."""
    await mcp.import_server(github_tools)
    log_event(logger, "Imported GitHub tools", tool_name="server", event="server_setup")


async def main() -> None:
    """Run the GitHub MCP server on stdio."""
    settings = get_settings()
    settings.configure_logging()

    try:
        client = get_github_client(settings)
    except ConfigurationError as exc:
        logger.error(f"Error: {exc}")
        raise SystemExit(1) from exc

    await setup()
    log_event(logger, "GitHub MCP Server connecting via stdio", tool_name="server", event="server_start")

    try:
        await mcp.run_async(transport="stdio")
    except Exception as e:
        logger.error(f"Failed to start GitHub MCP Server: {e}")
        raise
    finally:
        await client.close()


def cli() -> None:
    """CLI entry point for the github-tools-mcp command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
