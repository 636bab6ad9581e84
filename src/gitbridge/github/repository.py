"""Repository search, creation and forking."""

from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import CreateRepositoryArgs, ForkRepositoryArgs, SearchRepositoriesArgs


async def search_repositories(args: SearchRepositoriesArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(
            "/search/repositories",
            params={"q": args.query, "page": args.page or 1, "per_page": args.perPage or 30},
        )


async def create_repository(args: CreateRepositoryArgs, token: str) -> Any:
    body = {
        "name": args.name,
        "description": args.description,
        "private": args.private,
        "auto_init": args.autoInit,
    }
    async with GitHubClient(token) as github:
        return await github.post(
            "/user/repos", {key: value for key, value in body.items() if value is not None}
        )


async def fork_repository(args: ForkRepositoryArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.post(
            f"/repos/{args.owner}/{args.repo}/forks",
            params={"organization": args.organization},
        )
