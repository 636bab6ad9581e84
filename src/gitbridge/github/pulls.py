"""Pull request operations."""

from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import (
    CreatePullRequestArgs,
    CreatePullRequestReviewArgs,
    GetPullRequestArgs,
    GetPullRequestCommentsArgs,
    GetPullRequestFilesArgs,
    GetPullRequestReviewsArgs,
    GetPullRequestStatusArgs,
    ListPullRequestsArgs,
    MergePullRequestArgs,
    PullRequestRef,
    UpdatePullRequestBranchArgs,
)

_REF_FIELDS = {"owner", "repo", "pull_number"}


def _pulls_path(owner: str, repo: str) -> str:
    return f"/repos/{owner}/{repo}/pulls"


def _pull_path(args: PullRequestRef, suffix: str = "") -> str:
    return f"{_pulls_path(args.owner, args.repo)}/{args.pull_number}{suffix}"


async def create_pull_request(args: CreatePullRequestArgs, token: str) -> Any:
    body = args.model_dump(exclude={"owner", "repo"}, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.post(_pulls_path(args.owner, args.repo), body)


async def get_pull_request(args: GetPullRequestArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(_pull_path(args))


async def list_pull_requests(args: ListPullRequestsArgs, token: str) -> Any:
    params = args.model_dump(exclude={"owner", "repo"}, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.get(_pulls_path(args.owner, args.repo), params=params)


async def create_pull_request_review(args: CreatePullRequestReviewArgs, token: str) -> Any:
    body = args.model_dump(exclude=_REF_FIELDS, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.post(_pull_path(args, "/reviews"), body)


async def merge_pull_request(args: MergePullRequestArgs, token: str) -> Any:
    body = args.model_dump(exclude=_REF_FIELDS, exclude_none=True)
    async with GitHubClient(token) as github:
        return await github.put(_pull_path(args, "/merge"), body)


async def get_pull_request_files(args: GetPullRequestFilesArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(_pull_path(args, "/files"))


async def get_pull_request_status(args: GetPullRequestStatusArgs, token: str) -> Any:
    """Combined commit status of the pull request's head commit."""
    async with GitHubClient(token) as github:
        pull = await github.get(_pull_path(args))
        sha = pull["head"]["sha"]
        return await github.get(f"/repos/{args.owner}/{args.repo}/commits/{sha}/status")


async def update_pull_request_branch(args: UpdatePullRequestBranchArgs, token: str) -> Any:
    body = args.model_dump(exclude=_REF_FIELDS, exclude_none=True)
    async with GitHubClient(token) as github:
        await github.put(_pull_path(args, "/update-branch"), body)
    return {"success": True}


async def get_pull_request_comments(args: GetPullRequestCommentsArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(_pull_path(args, "/comments"))


async def get_pull_request_reviews(args: GetPullRequestReviewsArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(_pull_path(args, "/reviews"))
