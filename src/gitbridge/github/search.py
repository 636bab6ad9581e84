"""Code, issue and user search."""

from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import SearchArgs, SearchCodeArgs, SearchIssuesArgs, SearchUsersArgs


async def _search(kind: str, args: SearchArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        return await github.get(f"/search/{kind}", params=args.model_dump(exclude_none=True))


async def search_code(args: SearchCodeArgs, token: str) -> Any:
    return await _search("code", args, token)


async def search_issues(args: SearchIssuesArgs, token: str) -> Any:
    return await _search("issues", args, token)


async def search_users(args: SearchUsersArgs, token: str) -> Any:
    return await _search("users", args, token)
