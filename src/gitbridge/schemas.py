"""Argument models for every GitHub tool.

Each model doubles as the tool's published ``inputSchema`` (via
``model_json_schema``) and as the validator applied before a handler runs.
Unknown keys are ignored, mirroring how clients tend to send extra fields.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, StrictBool, StrictInt

PerPage = Annotated[StrictInt | None, Field(ge=1, le=100, description="Results per page (max 100)")]
Page = Annotated[StrictInt | None, Field(ge=1, description="Page number for pagination")]


class RepoArgs(BaseModel):
    owner: str = Field(description="Repository owner (username or organization)")
    repo: str = Field(description="Repository name")


class PullRequestRef(RepoArgs):
    pull_number: StrictInt = Field(description="Pull request number")


class IssueRef(RepoArgs):
    issue_number: StrictInt = Field(description="Issue number")


# Repositories


class SearchRepositoriesArgs(BaseModel):
    query: str = Field(description="Search query (see GitHub search syntax)")
    page: Page = None
    perPage: PerPage = None


class CreateRepositoryArgs(BaseModel):
    name: str = Field(description="Repository name")
    description: str | None = Field(default=None, description="Repository description")
    private: StrictBool | None = Field(default=None, description="Whether the repository should be private")
    autoInit: StrictBool | None = Field(default=None, description="Initialize with README.md")


class ForkRepositoryArgs(RepoArgs):
    organization: str | None = Field(
        default=None, description="Optional: organization to fork to (defaults to your personal account)"
    )


# Files


class GetFileContentsArgs(RepoArgs):
    path: str = Field(description="Path to the file or directory")
    branch: str | None = Field(default=None, description="Branch to get contents from")


class CreateOrUpdateFileArgs(RepoArgs):
    path: str = Field(description="Path where to create/update the file")
    content: str = Field(description="Content of the file")
    message: str = Field(description="Commit message")
    branch: str = Field(description="Branch to create/update the file in")
    sha: str | None = Field(
        default=None, description="SHA of the file being replaced (required when updating existing files)"
    )


class FileEntry(BaseModel):
    path: str
    content: str


class PushFilesArgs(RepoArgs):
    branch: str = Field(description="Branch to push to (e.g., 'main' or 'master')")
    files: list[FileEntry] = Field(description="Array of files to push")
    message: str = Field(description="Commit message")


# Issues


class CreateIssueArgs(RepoArgs):
    title: str
    body: str | None = None
    assignees: list[str] | None = None
    milestone: StrictInt | None = None
    labels: list[str] | None = None


class ListIssuesArgs(RepoArgs):
    direction: Literal["asc", "desc"] | None = None
    labels: list[str] | None = None
    page: Page = None
    per_page: PerPage = None
    since: str | None = None
    sort: Literal["created", "updated", "comments"] | None = None
    state: Literal["open", "closed", "all"] | None = None


class UpdateIssueArgs(IssueRef):
    title: str | None = None
    body: str | None = None
    assignees: list[str] | None = None
    milestone: StrictInt | None = None
    labels: list[str] | None = None
    state: Literal["open", "closed"] | None = None


class IssueCommentArgs(IssueRef):
    body: str


class GetIssueArgs(IssueRef):
    pass


# Pull requests


class CreatePullRequestArgs(RepoArgs):
    title: str = Field(description="Pull request title")
    body: str | None = Field(default=None, description="Pull request body/description")
    head: str = Field(description="The name of the branch where your changes are implemented")
    base: str = Field(description="The name of the branch you want the changes pulled into")
    draft: StrictBool | None = Field(default=None, description="Whether to create the pull request as a draft")
    maintainer_can_modify: StrictBool | None = Field(
        default=None, description="Whether maintainers can modify the pull request"
    )


class GetPullRequestArgs(PullRequestRef):
    pass


class ListPullRequestsArgs(RepoArgs):
    state: Literal["open", "closed", "all"] | None = None
    head: str | None = Field(default=None, description="Filter by head user or head organization and branch name")
    base: str | None = Field(default=None, description="Filter by base branch name")
    sort: Literal["created", "updated", "popularity", "long-running"] | None = None
    direction: Literal["asc", "desc"] | None = None
    per_page: PerPage = None
    page: Page = None


class ReviewComment(BaseModel):
    path: str = Field(description="The relative path to the file being commented on")
    position: StrictInt | None = Field(default=None, description="The position in the diff where you want to add a review comment")
    line: StrictInt | None = Field(default=None, description="The line number in the file where you want to add a review comment")
    body: str = Field(description="Text of the review comment")


class CreatePullRequestReviewArgs(PullRequestRef):
    commit_id: str | None = Field(default=None, description="The SHA of the commit that needs a review")
    body: str = Field(description="The body text of the review")
    event: Literal["APPROVE", "REQUEST_CHANGES", "COMMENT"] = Field(
        description="The review action to perform"
    )
    comments: list[ReviewComment] | None = Field(
        default=None, description="Comments to post as part of the review"
    )


class MergePullRequestArgs(PullRequestRef):
    commit_title: str | None = Field(default=None, description="Title for the automatic commit message")
    commit_message: str | None = Field(default=None, description="Extra detail to append to automatic commit message")
    merge_method: Literal["merge", "squash", "rebase"] | None = Field(
        default=None, description="Merge method to use"
    )


class GetPullRequestFilesArgs(PullRequestRef):
    pass


class GetPullRequestStatusArgs(PullRequestRef):
    pass


class UpdatePullRequestBranchArgs(PullRequestRef):
    expected_head_sha: str | None = Field(
        default=None, description="The expected SHA of the pull request's HEAD ref"
    )


class GetPullRequestCommentsArgs(PullRequestRef):
    pass


class GetPullRequestReviewsArgs(PullRequestRef):
    pass


# Branches and commits


class CreateBranchArgs(RepoArgs):
    branch: str = Field(description="Name for the new branch")
    from_branch: str | None = Field(
        default=None, description="Optional: source branch to create from (defaults to the repository's default branch)"
    )


class ListCommitsArgs(RepoArgs):
    sha: str | None = None
    page: Page = None
    perPage: PerPage = None


# Search


class SearchArgs(BaseModel):
    q: str
    order: Literal["asc", "desc"] | None = None
    page: Page = None
    per_page: PerPage = None


class SearchCodeArgs(SearchArgs):
    pass


class SearchIssuesArgs(SearchArgs):
    sort: (
        Literal[
            "comments",
            "reactions",
            "reactions-+1",
            "reactions--1",
            "reactions-smile",
            "reactions-thinking_face",
            "reactions-heart",
            "reactions-tada",
            "interactions",
            "created",
            "updated",
        ]
        | None
    ) = None


class SearchUsersArgs(SearchArgs):
    sort: Literal["followers", "repositories", "joined"] | None = None
