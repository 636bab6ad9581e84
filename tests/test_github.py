"""Tests for the GitHub REST handlers against a mocked API."""

from __future__ import annotations

import base64
import json

import pytest

from gitbridge import schemas
from gitbridge.errors import GitHubRateLimitError, GitHubResourceNotFoundError
from gitbridge.github import branches, files, issues, pulls, repository, search
from gitbridge.github.client import GitHubClient, _drop_none

TOKEN = "ghp_plain"


def _body(request) -> dict:
    return json.loads(request.content)


@pytest.mark.asyncio
async def test_client_sends_auth_headers(github_api):
    github_api.add("GET", "/user", {"login": "octocat"})

    async with GitHubClient(TOKEN) as github:
        assert await github.get("/user") == {"login": "octocat"}

    (request,) = github_api.requests
    assert request.headers["Authorization"] == "Bearer ghp_plain"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"
    assert request.headers["User-Agent"].startswith("gitbridge/")


@pytest.mark.asyncio
async def test_client_raises_typed_errors(github_api):
    with pytest.raises(GitHubResourceNotFoundError, match="Not Found"):
        async with GitHubClient(TOKEN) as github:
            await github.get("/repos/o/missing")


@pytest.mark.asyncio
async def test_client_reads_rate_limit_headers(github_api):
    github_api.add(
        "GET",
        "/search/code",
        {"message": "API rate limit exceeded"},
        status=403,
        headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1704067200"},
    )

    with pytest.raises(GitHubRateLimitError) as excinfo:
        await search.search_code(schemas.SearchCodeArgs(q="repo:o/r"), TOKEN)
    assert excinfo.value.reset_at.year == 2024


def test_drop_none_renders_booleans():
    assert _drop_none({"a": None, "b": True, "c": False, "d": 3}) == {
        "b": "true",
        "c": "false",
        "d": 3,
    }
    assert _drop_none(None) is None


@pytest.mark.asyncio
async def test_search_repositories_defaults_paging(github_api):
    github_api.add("GET", "/search/repositories", {"total_count": 0, "items": []})

    result = await repository.search_repositories(
        schemas.SearchRepositoriesArgs(query="lang:go stars:>1000"), TOKEN
    )

    assert result == {"total_count": 0, "items": []}
    params = github_api.requests[0].url.params
    assert params["q"] == "lang:go stars:>1000"
    assert params["page"] == "1"
    assert params["per_page"] == "30"


@pytest.mark.asyncio
async def test_create_repository_maps_auto_init(github_api):
    github_api.add("POST", "/user/repos", {"name": "demo"}, status=201)

    await repository.create_repository(
        schemas.CreateRepositoryArgs(name="demo", autoInit=True), TOKEN
    )

    assert _body(github_api.requests[0]) == {"name": "demo", "auto_init": True}


@pytest.mark.asyncio
async def test_get_file_contents_decodes_content(github_api):
    encoded = base64.b64encode(b"# Hello\n").decode()
    github_api.add(
        "GET", "/repos/o/r/contents/README.md", {"type": "file", "content": encoded}
    )

    result = await files.get_file_contents(
        schemas.GetFileContentsArgs(owner="o", repo="r", path="README.md", branch="dev"), TOKEN
    )

    assert result["content"] == "# Hello\n"
    assert github_api.requests[0].url.params["ref"] == "dev"


@pytest.mark.asyncio
async def test_create_or_update_file_looks_up_existing_sha(github_api):
    github_api.add("GET", "/repos/o/r/contents/a.txt", {"sha": "old-sha"})
    github_api.add("PUT", "/repos/o/r/contents/a.txt", {"commit": {"sha": "new"}})

    await files.create_or_update_file(
        schemas.CreateOrUpdateFileArgs(
            owner="o", repo="r", path="a.txt", content="hi", message="m", branch="main"
        ),
        TOKEN,
    )

    body = _body(github_api.requests[-1])
    assert body["sha"] == "old-sha"
    assert base64.b64decode(body["content"]) == b"hi"


@pytest.mark.asyncio
async def test_create_file_without_existing_sha(github_api):
    github_api.add("PUT", "/repos/o/r/contents/new.txt", {"commit": {"sha": "new"}}, status=201)

    await files.create_or_update_file(
        schemas.CreateOrUpdateFileArgs(
            owner="o", repo="r", path="new.txt", content="hi", message="m", branch="main"
        ),
        TOKEN,
    )

    assert "sha" not in _body(github_api.requests[-1])


@pytest.mark.asyncio
async def test_push_files_creates_one_commit(github_api):
    ref_path = "/repos/o/r/git/refs/heads/main"
    github_api.add("GET", ref_path, {"object": {"sha": "parent"}})
    github_api.add("POST", "/repos/o/r/git/trees", {"sha": "tree"}, status=201)
    github_api.add("POST", "/repos/o/r/git/commits", {"sha": "commit"}, status=201)
    github_api.add("PATCH", ref_path, {"object": {"sha": "commit"}})

    result = await files.push_files(
        schemas.PushFilesArgs(
            owner="o",
            repo="r",
            branch="main",
            message="m",
            files=[{"path": "a.txt", "content": "a"}, {"path": "b.txt", "content": "b"}],
        ),
        TOKEN,
    )

    assert result == {"object": {"sha": "commit"}}
    assert [request.method for request in github_api.requests] == ["GET", "POST", "POST", "PATCH"]
    tree = _body(github_api.requests[1])
    assert tree["base_tree"] == "parent"
    assert [entry["path"] for entry in tree["tree"]] == ["a.txt", "b.txt"]
    assert _body(github_api.requests[2])["parents"] == ["parent"]
    assert _body(github_api.requests[3]) == {"sha": "commit", "force": True}


@pytest.mark.asyncio
async def test_create_branch_from_default_branch(github_api):
    github_api.add("GET", "/repos/o/r", {"default_branch": "trunk"})
    github_api.add("GET", "/repos/o/r/git/refs/heads/trunk", {"object": {"sha": "tip"}})
    github_api.add("POST", "/repos/o/r/git/refs", {"ref": "refs/heads/feature"}, status=201)

    await branches.create_branch(
        schemas.CreateBranchArgs(owner="o", repo="r", branch="feature"), TOKEN
    )

    assert _body(github_api.requests[-1]) == {"ref": "refs/heads/feature", "sha": "tip"}


@pytest.mark.asyncio
async def test_list_issues_joins_labels(github_api):
    github_api.add("GET", "/repos/o/r/issues", [])

    await issues.list_issues(
        schemas.ListIssuesArgs(owner="o", repo="r", labels=["bug", "ui"], state="open"), TOKEN
    )

    params = github_api.requests[0].url.params
    assert params["labels"] == "bug,ui"
    assert params["state"] == "open"


@pytest.mark.asyncio
async def test_get_pull_request_status_uses_head_sha(github_api):
    github_api.add("GET", "/repos/o/r/pulls/5", {"head": {"sha": "abc"}})
    github_api.add("GET", "/repos/o/r/commits/abc/status", {"state": "success"})

    result = await pulls.get_pull_request_status(
        schemas.GetPullRequestStatusArgs(owner="o", repo="r", pull_number=5), TOKEN
    )

    assert result == {"state": "success"}


@pytest.mark.asyncio
async def test_update_pull_request_branch_reports_success(github_api):
    github_api.add("PUT", "/repos/o/r/pulls/5/update-branch", {"message": "Updating"}, status=202)

    result = await pulls.update_pull_request_branch(
        schemas.UpdatePullRequestBranchArgs(owner="o", repo="r", pull_number=5), TOKEN
    )

    assert result == {"success": True}


@pytest.mark.asyncio
async def test_merge_pull_request_sends_method(github_api):
    github_api.add("PUT", "/repos/o/r/pulls/5/merge", {"merged": True})

    await pulls.merge_pull_request(
        schemas.MergePullRequestArgs(owner="o", repo="r", pull_number=5, merge_method="squash"),
        TOKEN,
    )

    assert _body(github_api.requests[0]) == {"merge_method": "squash"}
