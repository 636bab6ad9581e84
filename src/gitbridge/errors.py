"""GitHub error hierarchy and the normalization applied to every tool call."""

from __future__ import annotations

import enum
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError


class GitHubError(Exception):
    """Failure reported by the GitHub REST API."""

    def __init__(self, message: str, status: int | None = None, response: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.response = response


class GitHubValidationError(GitHubError):
    pass


class GitHubResourceNotFoundError(GitHubError):
    pass


class GitHubAuthenticationError(GitHubError):
    pass


class GitHubPermissionError(GitHubError):
    pass


class GitHubConflictError(GitHubError):
    pass


class GitHubRateLimitError(GitHubError):
    def __init__(
        self,
        message: str,
        reset_at: datetime,
        status: int | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message, status, response)
        self.reset_at = reset_at


def _response_message(body: Any, default: str) -> str:
    if isinstance(body, Mapping):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return default


def _rate_limit_reset(body: Any, headers: Mapping[str, str]) -> datetime:
    reset = headers.get("x-ratelimit-reset")
    if reset:
        try:
            return datetime.fromtimestamp(int(reset), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            pass
    if isinstance(body, Mapping) and isinstance(body.get("reset_at"), str):
        try:
            return datetime.fromisoformat(body["reset_at"].replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc) + timedelta(seconds=60)


def create_github_error(
    status: int,
    body: Any,
    headers: Mapping[str, str] | None = None,
) -> GitHubError:
    """Map an HTTP failure status to the matching typed GitHub error."""
    headers = {key.lower(): value for key, value in (headers or {}).items()}
    if status == 401:
        return GitHubAuthenticationError(
            _response_message(body, "Authentication failed"), status, body
        )
    if status == 403:
        if headers.get("x-ratelimit-remaining") == "0":
            return GitHubRateLimitError(
                _response_message(body, "Rate limit exceeded"),
                _rate_limit_reset(body, headers),
                status,
                body,
            )
        return GitHubPermissionError(
            _response_message(body, "Insufficient permissions"), status, body
        )
    if status == 404:
        return GitHubResourceNotFoundError(
            _response_message(body, "Resource not found"), status, body
        )
    if status == 409:
        return GitHubConflictError(_response_message(body, "Conflict occurred"), status, body)
    if status == 422:
        return GitHubValidationError(_response_message(body, "Validation failed"), status, body)
    if status == 429:
        return GitHubRateLimitError(
            _response_message(body, "Rate limit exceeded"),
            _rate_limit_reset(body, headers),
            status,
            body,
        )
    return GitHubError(_response_message(body, "GitHub API error"), status, body)


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    CONFLICT = "conflict"
    GENERIC = "generic"
    UNKNOWN_TOOL = "unknown_tool"


_PREFIXES = {
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.AUTHENTICATION: "Authentication Failed",
    ErrorKind.PERMISSION: "Permission Denied",
    ErrorKind.RATE_LIMIT: "Rate Limit Exceeded",
    ErrorKind.CONFLICT: "Conflict",
}


def isoformat_utc(value: datetime) -> str:
    """Render as UTC ISO-8601 with a ``Z`` suffix; millis only when non-zero."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond // 1000:03d}"
    return text + "Z"


@dataclass(frozen=True)
class NormalizedError:
    """Single-kind, single-message representation of a failed tool call.

    ``prefixed`` is False for failures that did not come from GitHub; their
    generic message is surfaced verbatim.
    """

    kind: ErrorKind
    message: str
    details: Any = None
    reset_at: datetime | None = None
    prefixed: bool = True

    def format(self) -> str:
        if self.kind is ErrorKind.GENERIC:
            return f"GitHub API Error: {self.message}" if self.prefixed else self.message
        if self.kind is ErrorKind.UNKNOWN_TOOL:
            return self.message
        text = f"{_PREFIXES[self.kind]}: {self.message}"
        if self.kind is ErrorKind.VALIDATION and self.details is not None:
            text += f"\nDetails: {json.dumps(self.details, default=str)}"
        if self.kind is ErrorKind.RATE_LIMIT and self.reset_at is not None:
            text += f"\nResets at: {isoformat_utc(self.reset_at)}"
        return text


class ToolError(Exception):
    """Raised by the dispatcher; carries exactly one normalized error."""

    def __init__(self, error: NormalizedError) -> None:
        super().__init__(error.format())
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @classmethod
    def of(cls, kind: ErrorKind, message: str, **kwargs: Any) -> ToolError:
        return cls(NormalizedError(kind=kind, message=message, **kwargs))


def validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    """Every violation pydantic found, reduced to JSON-safe fields."""
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


_GITHUB_KINDS: tuple[tuple[type[GitHubError], ErrorKind], ...] = (
    (GitHubValidationError, ErrorKind.VALIDATION),
    (GitHubResourceNotFoundError, ErrorKind.NOT_FOUND),
    (GitHubAuthenticationError, ErrorKind.AUTHENTICATION),
    (GitHubPermissionError, ErrorKind.PERMISSION),
    (GitHubRateLimitError, ErrorKind.RATE_LIMIT),
    (GitHubConflictError, ErrorKind.CONFLICT),
)


def normalize_error(exc: BaseException) -> NormalizedError:
    """Map any raw failure onto exactly one normalized error."""
    if isinstance(exc, ToolError):
        return exc.error
    if isinstance(exc, ValidationError):
        return NormalizedError(
            ErrorKind.VALIDATION, "Invalid input", details=validation_details(exc)
        )
    if isinstance(exc, GitHubError):
        for error_type, kind in _GITHUB_KINDS:
            if isinstance(exc, error_type):
                break
        else:
            return NormalizedError(ErrorKind.GENERIC, exc.message)
        if kind is ErrorKind.VALIDATION:
            return NormalizedError(kind, exc.message, details=exc.response)
        if isinstance(exc, GitHubRateLimitError):
            return NormalizedError(kind, exc.message, reset_at=exc.reset_at)
        return NormalizedError(kind, exc.message)
    return NormalizedError(ErrorKind.GENERIC, str(exc) or type(exc).__name__, prefixed=False)


__all__ = [
    "ErrorKind",
    "GitHubAuthenticationError",
    "GitHubConflictError",
    "GitHubError",
    "GitHubPermissionError",
    "GitHubRateLimitError",
    "GitHubResourceNotFoundError",
    "GitHubValidationError",
    "NormalizedError",
    "ToolError",
    "create_github_error",
    "isoformat_utc",
    "normalize_error",
]
