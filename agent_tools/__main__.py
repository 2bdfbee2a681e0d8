"""Entry point for running a tool server as a module.

Usage: ``python -m agent_tools {github,crypto}``
"""

from __future__ import annotations

import argparse
from typing import Sequence

from agent_tools import crypto_server, github_server

SERVERS = {
    "github": github_server.cli,
    "crypto": crypto_server.cli,
}


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser."""
    parser = argparse.ArgumentParser(description="Run an agent tool MCP server on stdio")
    parser.add_argument("server", choices=sorted(SERVERS), help="Which tool server to run")
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    """Start the selected server and return an exit code."""
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    SERVERS[args.server]()
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
