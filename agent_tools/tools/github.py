"""GitHub tools: repositories, branches and pull requests.

Every handler converts failures into an error ``Reply`` instead of raising,
so a rejected call never leaves the agent without an answer.
"""

import json
import logging
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from agent_tools.errors import ApiError
from agent_tools.github_client import GitHubClient, get_github_client
from agent_tools.logging_config import tool_logging
from agent_tools.logging_utils import log_event
from agent_tools.replies import Reply

logger = logging.getLogger(__name__)

github_tools = FastMCP("GitHub Tools")

MAX_PER_PAGE = 100

Owner = Annotated[str, Field(description="The account owner of the repository (e.g. 'octocat').")]
Repo = Annotated[str, Field(description="The name of the repository without the .git extension.")]
PerPage = Annotated[int, Field(ge=1, description="The number of results per page (max 100).")]
Page = Annotated[int, Field(ge=1, description="Page number of the results to fetch.")]


def describe_failure(exc: Exception) -> str:
    """Render an API failure as ``message`` plus an optional ``Details:`` line."""
    if isinstance(exc, ApiError):
        text = exc.message or "An unknown error occurred."
        if exc.details:
            text += f"\nDetails: {json.dumps(exc.details)}"
        return text
    return str(exc) or "An unknown error occurred."


def pagination_note(returned: int, per_page: int, page: int) -> str:
    """Hint that another page may exist.

    GitHub's Link header is not consulted: a full page is taken to mean more
    results might follow, which is wrong when the total is an exact multiple
    of ``per_page``.
    """
    if returned == per_page:
        return f"\n\nNote: More results might be available on the next page (page {page + 1})."
    return ""


def _failure(action: str, exc: Exception) -> Reply:
    log_event(
        logger,
        f"Error {action}: {exc}",
        level=logging.ERROR,
        status_code=getattr(exc, "status_code", None),
        event="github_tool_error",
    )
    return Reply.failure(f"Error {action}: {describe_failure(exc)}")


# Implementation functions
async def create_repository_impl(
    client: GitHubClient,
    name: str,
    description: str | None = None,
    private: bool = False,
) -> Reply:
    """Create a repository for the authenticated user."""
    log_event(logger, f"Attempting to create repository: {name}", event="create_repository")
    try:
        repository = await client.create_repository(name, description=description, private=private)
    except Exception as exc:  # noqa: BLE001 - every failure becomes an error reply
        return _failure(f"creating repository '{name}'", exc)

    html_url = repository.get("html_url")
    log_event(logger, f"Successfully created repository: {html_url}", event="create_repository")
    return Reply.success(
        f"Successfully created repository: {html_url}",
        data={"full_name": repository.get("full_name"), "html_url": html_url},
    )


async def create_branch_impl(
    client: GitHubClient,
    owner: str,
    repo: str,
    branch: str,
    sha: str,
) -> Reply:
    """Create ``refs/heads/<branch>`` pointing at ``sha``."""
    log_event(
        logger,
        f"Attempting to create branch '{branch}' in {owner}/{repo} from SHA {sha}",
        event="create_branch",
    )
    try:
        ref = await client.create_ref(owner, repo, f"refs/heads/{branch}", sha)
    except Exception as exc:  # noqa: BLE001
        return _failure(f"creating branch '{branch}' in {owner}/{repo}", exc)

    ref_name = ref.get("ref")
    log_event(logger, f"Successfully created branch: {ref_name}", event="create_branch")
    return Reply.success(
        f"Successfully created branch '{branch}' in repository {owner}/{repo}. Ref: {ref_name}",
        data={"ref": ref_name, "sha": sha},
    )


async def create_pull_request_impl(
    client: GitHubClient,
    owner: str,
    repo: str,
    title: str,
    head: str,
    base: str,
    body: str | None = None,
) -> Reply:
    """Open a pull request from ``head`` into ``base``."""
    log_event(
        logger,
        f"Attempting to create PR in {owner}/{repo}: '{title}' ({head} -> {base})",
        event="create_pull_request",
    )
    try:
        pull = await client.create_pull_request(owner, repo, title, head, base, body=body)
    except Exception as exc:  # noqa: BLE001
        return _failure(f"creating pull request in {owner}/{repo}", exc)

    html_url = pull.get("html_url")
    log_event(logger, f"Successfully created PR: {html_url}", event="create_pull_request")
    return Reply.success(
        f"Successfully created pull request: {html_url}",
        data={"number": pull.get("number"), "html_url": html_url},
    )


async def merge_pull_request_impl(
    client: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
    commit_title: str | None = None,
    commit_message: str | None = None,
    merge_method: str = "merge",
) -> Reply:
    """Merge a pull request, adding hints for the usual refusal statuses."""
    log_event(
        logger,
        f"Attempting to merge PR #{pull_number} in {owner}/{repo}",
        event="merge_pull_request",
    )
    try:
        result = await client.merge_pull_request(
            owner,
            repo,
            pull_number,
            commit_title=commit_title,
            commit_message=commit_message,
            merge_method=merge_method,
        )
    except Exception as exc:  # noqa: BLE001
        reply = _failure(f"merging pull request #{pull_number} in {owner}/{repo}", exc)
        status_code = getattr(exc, "status_code", None)
        if status_code == 405:
            hint = " (Hint: The PR might not be mergeable yet. Check for conflicts or required checks.)"
        elif status_code == 409:
            hint = " (Hint: A conflict occurred during the merge attempt.)"
        else:
            return reply
        return Reply.failure(reply.text + hint)

    message = result.get("message")
    if not result.get("merged"):
        log_event(
            logger,
            f"Failed to merge PR #{pull_number}: {message}",
            level=logging.WARNING,
            event="merge_pull_request",
        )
        return Reply.failure(f"Failed to merge pull request #{pull_number}. Message: {message}")

    log_event(logger, f"Successfully merged PR #{pull_number}: {message}", event="merge_pull_request")
    return Reply.success(
        f"Successfully merged pull request #{pull_number}. Message: {message}",
        data={"merged": True, "sha": result.get("sha"), "message": message},
    )


async def list_repositories_impl(
    client: GitHubClient,
    visibility: str = "all",
    affiliation: str = "owner,collaborator,organization_member",
    type: str | None = None,
    sort: str = "pushed",
    direction: str = "desc",
    per_page: int = 30,
    page: int = 1,
) -> Reply:
    """List repositories of the authenticated user, one ``full_name`` per line."""
    per_page = min(per_page, MAX_PER_PAGE)
    query: dict[str, Any] = {"sort": sort, "direction": direction, "per_page": per_page, "page": page}
    # GitHub answers 422 when ``type`` is combined with visibility or affiliation.
    if type is not None:
        query["type"] = type
    else:
        query["visibility"] = visibility
        query["affiliation"] = affiliation

    log_event(
        logger,
        "Attempting to list repositories",
        query_params=query,
        event="list_repositories",
    )
    try:
        repositories = await client.list_repositories(**query)
    except Exception as exc:  # noqa: BLE001
        return _failure("listing repositories", exc)

    names = [repository.get("full_name") for repository in repositories]
    log_event(
        logger,
        f"Successfully listed {len(names)} repositories.",
        result_count=len(names),
        event="list_repositories",
    )

    text = f"Found {len(names)} repositories:\n" + "\n".join(str(name) for name in names)
    text += pagination_note(len(repositories), per_page, page)
    return Reply.success(
        text,
        data={"repositories": names, "page": page, "per_page": per_page},
    )


async def list_branches_impl(
    client: GitHubClient,
    owner: str,
    repo: str,
    per_page: int = 30,
    page: int = 1,
) -> Reply:
    """List branch names of a repository."""
    per_page = min(per_page, MAX_PER_PAGE)
    log_event(
        logger,
        f"Attempting to list branches for {owner}/{repo} (page {page})",
        event="list_branches",
    )
    try:
        branches = await client.list_branches(owner, repo, per_page=per_page, page=page)
    except Exception as exc:  # noqa: BLE001
        return _failure(f"listing branches for {owner}/{repo}", exc)

    names = [branch.get("name") for branch in branches]
    log_event(
        logger,
        f"Successfully listed {len(names)} branches for {owner}/{repo}.",
        result_count=len(names),
        event="list_branches",
    )

    text = f"Found {len(names)} branches in {owner}/{repo}:\n" + "\n".join(str(name) for name in names)
    text += pagination_note(len(branches), per_page, page)
    return Reply.success(
        text,
        data={"branches": names, "page": page, "per_page": per_page},
    )


# MCP tool wrappers
@github_tools.tool()
@tool_logging("create_repository")
async def create_repository(
    name: Annotated[str, Field(description="The name of the repository.")],
    description: Annotated[str | None, Field(description="A short description of the repository.")] = None,
    private: Annotated[bool, Field(description="Whether the repository is private.")] = False,
) -> ToolResult:
    """Create a new GitHub repository for the authenticated user.

    Returns the URL of the new repository.
    """
    reply = await create_repository_impl(
        get_github_client(), name, description=description, private=private
    )
    return reply.to_tool_result()


@github_tools.tool()
@tool_logging("create_branch")
async def create_branch(
    owner: Owner,
    repo: Repo,
    branch: Annotated[str, Field(description="The name for the new branch.")],
    sha: Annotated[str, Field(description="The SHA1 of the commit to base the new branch on.")],
) -> ToolResult:
    """Create a branch in a repository from an existing commit SHA."""
    reply = await create_branch_impl(get_github_client(), owner, repo, branch, sha)
    return reply.to_tool_result()


@github_tools.tool()
@tool_logging("create_pull_request")
async def create_pull_request(
    owner: Owner,
    repo: Repo,
    title: Annotated[str, Field(description="The title of the pull request.")],
    head: Annotated[str, Field(description="The branch where your changes are implemented.")],
    base: Annotated[str, Field(description="The branch you want the changes pulled into.")],
    body: Annotated[str | None, Field(description="The pull request description.")] = None,
) -> ToolResult:
    """Open a pull request.

    Returns the URL of the new pull request.
    """
    reply = await create_pull_request_impl(
        get_github_client(), owner, repo, title, head, base, body=body
    )
    return reply.to_tool_result()


@github_tools.tool()
@tool_logging("merge_pull_request")
async def merge_pull_request(
    owner: Owner,
    repo: Repo,
    pull_number: Annotated[int, Field(ge=1, description="The number that identifies the pull request.")],
    commit_title: Annotated[str | None, Field(description="Title for the automatic commit message.")] = None,
    commit_message: Annotated[
        str | None, Field(description="Extra detail to append to the automatic commit message.")
    ] = None,
    merge_method: Annotated[
        Literal["merge", "squash", "rebase"], Field(description="Merge method to use.")
    ] = "merge",
) -> ToolResult:
    """Merge a pull request.

    Refusals caused by conflicts or pending checks come back with a hint.
    """
    reply = await merge_pull_request_impl(
        get_github_client(),
        owner,
        repo,
        pull_number,
        commit_title=commit_title,
        commit_message=commit_message,
        merge_method=merge_method,
    )
    return reply.to_tool_result()


@github_tools.tool()
@tool_logging("list_repositories")
async def list_repositories(
    visibility: Annotated[
        Literal["all", "public", "private"], Field(description="Limit results by repository visibility.")
    ] = "all",
    affiliation: Annotated[
        str,
        Field(description="Comma-separated affiliations (owner, collaborator, organization_member)."),
    ] = "owner,collaborator,organization_member",
    type: Annotated[
        Literal["all", "owner", "public", "private", "member"] | None,
        Field(
            description=(
                "Limit results by repository type. Not sent unless given; when given, "
                "visibility and affiliation are ignored."
            )
        ),
    ] = None,
    sort: Annotated[
        Literal["created", "updated", "pushed", "full_name"], Field(description="The property to sort by.")
    ] = "pushed",
    direction: Annotated[Literal["asc", "desc"], Field(description="The order to sort by.")] = "desc",
    per_page: PerPage = 30,
    page: Page = 1,
) -> ToolResult:
    """List repositories the authenticated user can access.

    ``type`` overrides ``visibility`` and ``affiliation``: when it is given
    those two filters are not sent, and when it is omitted GitHub is not sent
    a ``type`` at all.

    A note about further pages is added whenever a full page comes back; it
    is a guess, not a guarantee that another page exists.
    """
    reply = await list_repositories_impl(
        get_github_client(),
        visibility=visibility,
        affiliation=affiliation,
        type=type,
        sort=sort,
        direction=direction,
        per_page=per_page,
        page=page,
    )
    return reply.to_tool_result()


@github_tools.tool()
@tool_logging("list_branches")
async def list_branches(
    owner: Owner,
    repo: Repo,
    per_page: PerPage = 30,
    page: Page = 1,
) -> ToolResult:
    """List branches in a repository.

    A note about further pages is added whenever a full page comes back; it
    is a guess, not a guarantee that another page exists.
    """
    reply = await list_branches_impl(
        get_github_client(), owner, repo, per_page=per_page, page=page
    )
    return reply.to_tool_result()
