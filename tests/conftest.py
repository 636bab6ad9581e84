from __future__ import annotations

from typing import Any

import httpx
import pytest

from gitbridge.credentials import CredentialStore
from gitbridge.github import client as client_module


class FakeGitHub:
    """Route table answering GitHub REST calls through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, dict[str, str] | None]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[(method, path)] = (status, payload, headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, payload, headers = route
        if payload is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=payload, headers=headers)


@pytest.fixture
def github_api(monkeypatch: pytest.MonkeyPatch) -> FakeGitHub:
    fake = FakeGitHub()
    monkeypatch.setattr(client_module, "transport", httpx.MockTransport(fake.handler))
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    return fake


@pytest.fixture
def store() -> CredentialStore:
    return CredentialStore()
