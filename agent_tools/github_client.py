"""Client for the GitHub REST API.

Covers the handful of endpoints the GitHub tools need. Authentication is a
bearer token taken from settings; every failure surfaces as an
``agent_tools.errors.ApiError`` subclass.
"""

from typing import Any

import httpx

from agent_tools.config import Settings, get_settings
from agent_tools.http_client import ApiClient
from agent_tools.types import (
    GitHubBranch,
    GitHubMergeResult,
    GitHubPullRequest,
    GitHubRef,
    GitHubRepository,
)


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset values so GitHub applies its own defaults."""
    return {key: value for key, value in values.items() if value is not None}


class GitHubClient(ApiClient):
    """Client for GitHub API access."""

    service_name = "GitHub"

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Raises:
            ConfigurationError: If no GitHub token is configured.
        """
        self.settings = settings or get_settings()
        token = self.settings.require_github_token()
        super().__init__(
            self.settings.github_api_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self.settings.github_api_version,
                "User-Agent": self.settings.github_user_agent,
            },
            timeout=self.settings.github_timeout,
            retry_attempts=self.settings.http_retry_attempts,
            retry_backoff=self.settings.http_retry_backoff,
            transport=transport,
        )

    async def create_repository(
        self,
        name: str,
        description: str | None = None,
        private: bool = False,
    ) -> GitHubRepository:
        """Create a repository owned by the authenticated user."""
        return await self._request(
            "POST",
            "user/repos",
            event="github_create_repository",
            json=_compact({"name": name, "description": description, "private": private}),
        )

    async def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitHubRef:
        """Create a git reference (e.g. ``refs/heads/feature``) pointing at ``sha``."""
        return await self._request(
            "POST",
            f"repos/{owner}/{repo}/git/refs",
            event="github_create_ref",
            json={"ref": ref, "sha": sha},
        )

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
    ) -> GitHubPullRequest:
        """Open a pull request from ``head`` into ``base``."""
        return await self._request(
            "POST",
            f"repos/{owner}/{repo}/pulls",
            event="github_create_pull_request",
            json=_compact(
                {"title": title, "head": head, "base": base, "body": body}
            ),
        )

    async def merge_pull_request(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        commit_title: str | None = None,
        commit_message: str | None = None,
        merge_method: str = "merge",
    ) -> GitHubMergeResult:
        """Merge a pull request.

        GitHub answers 405 when the pull request is not mergeable and 409 when
        the head moved or conflicts during the merge.
        """
        return await self._request(
            "PUT",
            f"repos/{owner}/{repo}/pulls/{pull_number}/merge",
            event="github_merge_pull_request",
            json=_compact(
                {
                    "commit_title": commit_title,
                    "commit_message": commit_message,
                    "merge_method": merge_method,
                }
            ),
        )

    async def list_repositories(
        self,
        *,
        visibility: str | None = None,
        affiliation: str | None = None,
        type: str | None = None,
        sort: str | None = None,
        direction: str | None = None,
        per_page: int = 30,
        page: int = 1,
    ) -> list[GitHubRepository]:
        """List repositories the authenticated user can access."""
        params = _compact(
            {
                "visibility": visibility,
                "affiliation": affiliation,
                "type": type,
                "sort": sort,
                "direction": direction,
                "per_page": per_page,
                "page": page,
            }
        )
        return await self._request(
            "GET", "user/repos", event="github_list_repositories", params=params
        )

    async def list_branches(
        self,
        owner: str,
        repo: str,
        *,
        per_page: int = 30,
        page: int = 1,
    ) -> list[GitHubBranch]:
        """List branches of a repository."""
        return await self._request(
            "GET",
            f"repos/{owner}/{repo}/branches",
            event="github_list_branches",
            params={"per_page": per_page, "page": page},
        )


# Process-wide client instance
_client: GitHubClient | None = None


def get_github_client(settings: Settings | None = None) -> GitHubClient:
    """Get or create the process-wide GitHub client.

    Returns:
        GitHub client instance
    """
    global _client
    if _client is None:
        _client = GitHubClient(settings)
    return _client
