"""GitHub REST handlers, one async function per tool."""

from . import branches, commits, files, issues, pulls, repository, search
from .client import GitHubClient

__all__ = [
    "GitHubClient",
    "branches",
    "commits",
    "files",
    "issues",
    "pulls",
    "repository",
    "search",
]
