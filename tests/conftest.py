import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest


# Ensure the repository root is on the import path so ``agent_tools`` can be
# imported without requiring callers to set PYTHONPATH manually.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from agent_tools.config import Settings  # noqa: E402

Handler = Callable[[httpx.Request], httpx.Response]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Include tests marked as integration",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line("markers", "unit: fast tests without network access")
    config.addinivalue_line("markers", "integration: tests that talk to the real APIs")

    if config.getoption("--run-integration"):
        # The default "-m not integration" expression in ``pyproject.toml``
        # excludes integration tests. Clear it so the explicit flag can
        # include them without requiring callers to override mark selection.
        config.option.markexpr = ""


def pytest_collection_modifyitems(config, items):
    """Mark tests as unit by default unless explicitly tagged as integration."""

    unit_marker = pytest.mark.unit
    run_integration = config.getoption("--run-integration")
    skip_integration = pytest.mark.skip(
        reason="Integration tests require --run-integration"
    )

    for item in items:
        is_integration = any(mark.name == "integration" for mark in item.iter_markers())

        if is_integration and not run_integration:
            item.add_marker(skip_integration)
            continue

        if not is_integration:
            item.add_marker(unit_marker)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        github_token="test-token",
        github_api_url="https://api.github.test",
        coingecko_base_url="https://coingecko.test/api/v3/",
        _env_file=None,
    )


@pytest.fixture
def mock_transport() -> Callable[[Handler], httpx.MockTransport]:
    """Build an httpx transport that answers with ``handler``."""

    def factory(handler: Handler) -> httpx.MockTransport:
        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def mock_github_client(mocker):
    """Mock the GitHub client and patch the tool module's accessor."""

    client_mock = AsyncMock()
    client_mock.create_repository.return_value = {
        "full_name": "octocat/hello-world",
        "html_url": "https://github.com/octocat/hello-world",
    }
    client_mock.create_ref.return_value = {"ref": "refs/heads/feature"}
    client_mock.create_pull_request.return_value = {
        "number": 7,
        "html_url": "https://github.com/octocat/hello-world/pull/7",
    }
    client_mock.merge_pull_request.return_value = {
        "sha": "abc123",
        "merged": True,
        "message": "Pull Request successfully merged",
    }
    client_mock.list_repositories.return_value = [
        {"full_name": "octocat/hello-world"},
        {"full_name": "octocat/spoon-knife"},
    ]
    client_mock.list_branches.return_value = [{"name": "main"}, {"name": "develop"}]

    mocker.patch("agent_tools.tools.github.get_github_client", return_value=client_mock)
    return client_mock


def make_coin_detail(
    coin_id: str,
    name: str,
    price: float,
    market_cap: float | None = 1_000_000_000.0,
    description: str | None = None,
) -> dict[str, Any]:
    """Shape a CoinGecko ``coins/{id}`` payload."""
    return {
        "id": coin_id,
        "name": name,
        "market_data": {
            "current_price": {"usd": price},
            "market_cap": {"usd": market_cap},
        },
        "description": {"en": description if description is not None else ""},
        "image": {"large": f"https://assets.coingecko.test/{coin_id}/large.png"},
    }


COIN_CATALOG = [
    {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin"},
    {"id": "ethereum", "symbol": "eth", "name": "Ethereum"},
    {"id": "pepe", "symbol": "pepe", "name": "Pepe"},
    {"id": "shiba-inu", "symbol": "shib", "name": "Shiba Inu"},
    {"id": "wrapped-shib", "symbol": "wshib", "name": "shib"},
]

COIN_DETAILS = {
    "bitcoin": make_coin_detail(
        "bitcoin",
        "Bitcoin",
        67_000.0,
        market_cap=1_330_000_000_000.0,
        description="Bitcoin is the first cryptocurrency.\nIt was created in 2009.",
    ),
    "ethereum": make_coin_detail("ethereum", "Ethereum", 3_350.0, market_cap=402_000_000_000.0),
    "pepe": make_coin_detail("pepe", "Pepe", 0.0000123, market_cap=5_200_000_000.0),
    "shiba-inu": make_coin_detail("shiba-inu", "Shiba Inu", 0.000025),
}


@pytest.fixture
def mock_coingecko_client():
    """Mock CoinGecko client backed by a small in-memory catalog."""

    client_mock = AsyncMock()
    client_mock.list_coins.return_value = list(COIN_CATALOG)

    async def get_coin(coin_id: str) -> dict[str, Any]:
        return COIN_DETAILS[coin_id]

    client_mock.get_coin.side_effect = get_coin
    return client_mock


@pytest.fixture
def coin_detail() -> Callable[..., dict[str, Any]]:
    """Factory for CoinGecko coin detail payloads."""
    return make_coin_detail
