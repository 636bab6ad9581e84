"""Tool registry for the gitbridge MCP server.

Each tool is a frozen :class:`ToolDescriptor` binding a name, a description,
the pydantic model that validates its arguments, and the async handler that
performs the GitHub call. Registering a tool means appending a descriptor to
``TOOLS``; nothing else changes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from mcp.types import Tool
from pydantic import BaseModel

from gitbridge import schemas
from gitbridge.github import branches, commits, files, issues, pulls, repository, search

Handler = Callable[[Any, str], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    """Definition for an MCP tool."""

    name: str
    description: str
    arguments: type[BaseModel]
    handler: Handler

    def input_schema(self) -> dict[str, Any]:
        return self.arguments.model_json_schema()

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema())


# =============================================================================
# Tool definitions
# =============================================================================

TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        "create_or_update_file",
        "Create or update a single file in a GitHub repository",
        schemas.CreateOrUpdateFileArgs,
        files.create_or_update_file,
    ),
    ToolDescriptor(
        "search_repositories",
        "Search for GitHub repositories",
        schemas.SearchRepositoriesArgs,
        repository.search_repositories,
    ),
    ToolDescriptor(
        "create_repository",
        "Create a new GitHub repository in your account",
        schemas.CreateRepositoryArgs,
        repository.create_repository,
    ),
    ToolDescriptor(
        "get_file_contents",
        "Get the contents of a file or directory from a GitHub repository",
        schemas.GetFileContentsArgs,
        files.get_file_contents,
    ),
    ToolDescriptor(
        "push_files",
        "Push multiple files to a GitHub repository in a single commit",
        schemas.PushFilesArgs,
        files.push_files,
    ),
    ToolDescriptor(
        "create_issue",
        "Create a new issue in a GitHub repository",
        schemas.CreateIssueArgs,
        issues.create_issue,
    ),
    ToolDescriptor(
        "create_pull_request",
        "Create a new pull request in a GitHub repository",
        schemas.CreatePullRequestArgs,
        pulls.create_pull_request,
    ),
    ToolDescriptor(
        "fork_repository",
        "Fork a GitHub repository to your account or specified organization",
        schemas.ForkRepositoryArgs,
        repository.fork_repository,
    ),
    ToolDescriptor(
        "create_branch",
        "Create a new branch in a GitHub repository",
        schemas.CreateBranchArgs,
        branches.create_branch,
    ),
    ToolDescriptor(
        "list_commits",
        "Get list of commits of a branch in a GitHub repository",
        schemas.ListCommitsArgs,
        commits.list_commits,
    ),
    ToolDescriptor(
        "list_issues",
        "List issues in a GitHub repository with filtering options",
        schemas.ListIssuesArgs,
        issues.list_issues,
    ),
    ToolDescriptor(
        "update_issue",
        "Update an existing issue in a GitHub repository",
        schemas.UpdateIssueArgs,
        issues.update_issue,
    ),
    ToolDescriptor(
        "add_issue_comment",
        "Add a comment to an existing issue",
        schemas.IssueCommentArgs,
        issues.add_issue_comment,
    ),
    ToolDescriptor(
        "search_code",
        "Search for code across GitHub repositories",
        schemas.SearchCodeArgs,
        search.search_code,
    ),
    ToolDescriptor(
        "search_issues",
        "Search for issues and pull requests across GitHub repositories",
        schemas.SearchIssuesArgs,
        search.search_issues,
    ),
    ToolDescriptor(
        "search_users",
        "Search for users on GitHub",
        schemas.SearchUsersArgs,
        search.search_users,
    ),
    ToolDescriptor(
        "get_issue",
        "Get details of a specific issue in a GitHub repository.",
        schemas.GetIssueArgs,
        issues.get_issue,
    ),
    ToolDescriptor(
        "get_pull_request",
        "Get details of a specific pull request",
        schemas.GetPullRequestArgs,
        pulls.get_pull_request,
    ),
    ToolDescriptor(
        "list_pull_requests",
        "List and filter repository pull requests",
        schemas.ListPullRequestsArgs,
        pulls.list_pull_requests,
    ),
    ToolDescriptor(
        "create_pull_request_review",
        "Create a review on a pull request",
        schemas.CreatePullRequestReviewArgs,
        pulls.create_pull_request_review,
    ),
    ToolDescriptor(
        "merge_pull_request",
        "Merge a pull request",
        schemas.MergePullRequestArgs,
        pulls.merge_pull_request,
    ),
    ToolDescriptor(
        "get_pull_request_files",
        "Get the list of files changed in a pull request",
        schemas.GetPullRequestFilesArgs,
        pulls.get_pull_request_files,
    ),
    ToolDescriptor(
        "get_pull_request_status",
        "Get the combined status of all status checks for a pull request",
        schemas.GetPullRequestStatusArgs,
        pulls.get_pull_request_status,
    ),
    ToolDescriptor(
        "update_pull_request_branch",
        "Update a pull request branch with the latest changes from the base branch",
        schemas.UpdatePullRequestBranchArgs,
        pulls.update_pull_request_branch,
    ),
    ToolDescriptor(
        "get_pull_request_comments",
        "Get the review comments on a pull request",
        schemas.GetPullRequestCommentsArgs,
        pulls.get_pull_request_comments,
    ),
    ToolDescriptor(
        "get_pull_request_reviews",
        "Get the reviews on a pull request",
        schemas.GetPullRequestReviewsArgs,
        pulls.get_pull_request_reviews,
    ),
)


def index_tools(tools: Sequence[ToolDescriptor]) -> dict[str, ToolDescriptor]:
    """Map names to descriptors.

    Raises:
        ValueError: If two descriptors share a name.
    """
    index: dict[str, ToolDescriptor] = {}
    for tool in tools:
        if tool.name in index:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        index[tool.name] = tool
    return index


TOOL_INDEX: Mapping[str, ToolDescriptor] = index_tools(TOOLS)


def list_tools() -> list[ToolDescriptor]:
    """All descriptors, in declaration order."""
    return list(TOOLS)


def get_tool(name: str) -> ToolDescriptor | None:
    return TOOL_INDEX.get(name)


def build_tools() -> list[Tool]:
    """Render every descriptor as an MCP ``Tool`` for capability discovery."""
    return [tool.to_tool() for tool in TOOLS]


__all__ = ["TOOLS", "ToolDescriptor", "build_tools", "get_tool", "list_tools"]
