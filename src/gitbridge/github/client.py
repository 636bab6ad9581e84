"""Minimal async GitHub REST client used by every tool handler."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from gitbridge import __version__
from gitbridge.errors import create_github_error

logger = logging.getLogger("gitbridge.github")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"gitbridge/{__version__}"

# Tests swap this for an ``httpx.MockTransport``.
transport: httpx.AsyncBaseTransport | None = None


def _drop_none(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


class GitHubClient:
    """Thin wrapper over ``httpx.AsyncClient`` bound to one token.

    Non-2xx responses raise the typed error from
    :func:`gitbridge.errors.create_github_error`.
    """

    def __init__(self, token: str, *, base_url: str | None = None) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            headers={
                "Accept": "application/vnd.github.v3+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": USER_AGENT,
            },
            timeout=float(os.environ.get("GITHUB_REQUEST_TIMEOUT", DEFAULT_TIMEOUT)),
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        response = await self._client.request(
            method,
            path,
            params=_drop_none(params),
            json=body,
        )
        payload = _parse_body(response)
        if response.is_error:
            logger.debug("GitHub %s %s failed with %s", method, path, response.status_code)
            raise create_github_error(response.status_code, payload, response.headers)
        return payload

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, body=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, body=body, **kwargs)
