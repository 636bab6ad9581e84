from __future__ import annotations

from typing import Any

from gitbridge.github.client import GitHubClient
from gitbridge.schemas import CreateBranchArgs


async def get_default_branch_sha(github: GitHubClient, owner: str, repo: str) -> str:
    """SHA at the tip of the repository's default branch."""
    repository = await github.get(f"/repos/{owner}/{repo}")
    ref = await github.get(
        f"/repos/{owner}/{repo}/git/refs/heads/{repository['default_branch']}"
    )
    return ref["object"]["sha"]


async def create_branch(args: CreateBranchArgs, token: str) -> Any:
    async with GitHubClient(token) as github:
        if args.from_branch:
            source = await github.get(
                f"/repos/{args.owner}/{args.repo}/git/refs/heads/{args.from_branch}"
            )
            sha = source["object"]["sha"]
        else:
            sha = await get_default_branch_sha(github, args.owner, args.repo)
        return await github.post(
            f"/repos/{args.owner}/{args.repo}/git/refs",
            {"ref": f"refs/heads/{args.branch}", "sha": sha},
        )
