from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import ListCommitsArgs


async def list_commits(args: ListCommitsArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(
            f"/repos/{args.owner}/{args.repo}/commits",
            params={"sha": args.sha, "page": args.page, "per_page": args.perPage},
        )
