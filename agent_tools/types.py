"""Shared TypedDict definitions for structured data types used across the app."""

from __future__ import annotations

from typing import TypedDict


class GitHubRepository(TypedDict, total=False):
    """Repository entry returned by the GitHub repos endpoints."""

    id: int
    name: str
    full_name: str
    html_url: str
    private: bool
    description: str | None


class GitHubBranch(TypedDict, total=False):
    """Branch entry returned by the list-branches endpoint."""

    name: str
    protected: bool
    commit: dict[str, object]


class GitHubRef(TypedDict, total=False):
    """Git reference created by the refs endpoint."""

    ref: str
    node_id: str
    url: str
    object: dict[str, object]


class GitHubPullRequest(TypedDict, total=False):
    """Pull request as returned on creation."""

    id: int
    number: int
    html_url: str
    state: str
    title: str


class GitHubMergeResult(TypedDict, total=False):
    """Body of the merge-pull-request response."""

    sha: str
    merged: bool
    message: str


class CoinListEntry(TypedDict):
    """Catalog entry from CoinGecko's ``coins/list`` endpoint."""

    id: str
    symbol: str
    name: str


class CryptoQuote(TypedDict):
    """Price snapshot for a single coin."""

    name: str
    symbol: str
    price: float
    currency: str
    marketCap: float | None
    description: str
    image: str | None
    source: str
    fetchedAt: str


class CryptoComparison(TypedDict):
    """Structured payload of a two-coin price comparison."""

    crypto1: CryptoQuote
    crypto2: CryptoQuote
    ratio: float
    inverseRatio: float
