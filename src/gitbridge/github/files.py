"""File reads, single-file writes and multi-file commits."""

from __future__ import annotations

import base64
from typing import Any

from gitbridge.errors import GitHubResourceNotFoundError
from gitbridge.github.client import GitHubClient
from gitbridge.schemas import CreateOrUpdateFileArgs, FileEntry, GetFileContentsArgs, PushFilesArgs


def _contents_path(owner: str, repo: str, path: str) -> str:
    return f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}"


async def get_file_contents(args: GetFileContentsArgs, token: str) -> Any:
    """Directory listings pass through; file content is base64-decoded."""
    async with GitHubClient(token) as github:
        data = await github.get(
            _contents_path(args.owner, args.repo, args.path),
            params={"ref": args.branch},
        )
    if isinstance(data, dict) and isinstance(data.get("content"), str):
        data["content"] = base64.b64decode(data["content"]).decode("utf-8", errors="replace")
    return data


async def create_or_update_file(args: CreateOrUpdateFileArgs, token: str) -> Any:
    path = _contents_path(args.owner, args.repo, args.path)
    async with GitHubClient(token) as github:
        sha = args.sha
        if sha is None:
            try:
                existing = await github.get(path, params={"ref": args.branch})
            except GitHubResourceNotFoundError:
                existing = None
            if isinstance(existing, dict):
                sha = existing.get("sha")
        body = {
            "message": args.message,
            "content": base64.b64encode(args.content.encode("utf-8")).decode("ascii"),
            "branch": args.branch,
        }
        if sha:
            body["sha"] = sha
        return await github.put(path, body)


async def _create_tree(
    github: GitHubClient, owner: str, repo: str, files: list[FileEntry], base_tree: str
) -> dict[str, Any]:
    tree = [
        {"path": entry.path, "mode": "100644", "type": "blob", "content": entry.content}
        for entry in files
    ]
    return await github.post(
        f"/repos/{owner}/{repo}/git/trees", {"tree": tree, "base_tree": base_tree}
    )


async def push_files(args: PushFilesArgs, token: str) -> Any:
    """Commit every file onto ``branch`` in one commit and move the ref."""
    ref_path = f"/repos/{args.owner}/{args.repo}/git/refs/heads/{args.branch}"
    async with GitHubClient(token) as github:
        ref = await github.get(ref_path)
        parent_sha = ref["object"]["sha"]
        tree = await _create_tree(github, args.owner, args.repo, args.files, parent_sha)
        commit = await github.post(
            f"/repos/{args.owner}/{args.repo}/git/commits",
            {"message": args.message, "tree": tree["sha"], "parents": [parent_sha]},
        )
        return await github.patch(ref_path, {"sha": commit["sha"], "force": True})
