"""Issue creation, listing, updates and comments."""

from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import (
    CreateIssueArgs,
    GetIssueArgs,
    IssueCommentArgs,
    ListIssuesArgs,
    UpdateIssueArgs,
)


def _issue_path(owner: str, repo: str, issue_number: int | None = None) -> str:
    path = f"/repos/{owner}/{repo}/issues"
    return path if issue_number is None else f"{path}/{issue_number}"


async def create_issue(args: CreateIssueArgs, token: str) -> Any:
    body = args.model_dump(exclude={"owner", "repo"}, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.post(_issue_path(args.owner, args.repo), body)


async def list_issues(args: ListIssuesArgs, token: str) -> Any:
    params = args.model_dump(exclude={"owner", "repo", "labels"}, exclude_none=True)
    if args.labels:
        params["labels"] = ",".join(args.labels)
    async with GitHubClient(token) as github:
        return await github.get(_issue_path(args.owner, args.repo), params=params)


async def update_issue(args: UpdateIssueArgs, token: str) -> Any:
    body = args.model_dump(exclude={"owner", "repo", "issue_number"}, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.patch(_issue_path(args.owner, args.repo, args.issue_number), body)


async def add_issue_comment(args: IssueCommentArgs, token: str) -> Any:
    path = _issue_path(args.owner, args.repo, args.issue_number) + "/comments"
    async with GitHubClient(token) as github:
        return await github.post(path, {"body": args.body})


async def get_issue(args: GetIssueArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(_issue_path(args.owner, args.repo, args.issue_number))
