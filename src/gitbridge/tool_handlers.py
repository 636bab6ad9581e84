"""MCP protocol-layer tool dispatch for gitbridge.server."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from mcp.types import TextContent
from pydantic import ValidationError

from gitbridge.errors import ErrorKind, ToolError, normalize_error
from gitbridge.telemetry import generate_request_id, set_attributes, trace_span
from gitbridge.tools import ToolDescriptor

MISSING_TOKEN_MESSAGE = "GitHub access token not provided. Please connect with a valid token."


@dataclass(frozen=True)
class ToolHandlerDeps:
    """Registry lookup and credential source used by the dispatcher."""

    get_tool: Callable[[str], ToolDescriptor | None]
    get_credential: Callable[[], str | None]


def json_text(payload: Any) -> list[TextContent]:
    """Serialize a handler result into the MCP text content envelope."""
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


async def _dispatch(
    name: str,
    arguments: Mapping[str, Any] | None,
    deps: ToolHandlerDeps,
) -> Any:
    if arguments is None:
        raise ToolError.of(ErrorKind.VALIDATION, "Arguments are required")

    # Checked before the registry so every tool fails the same way.
    token = deps.get_credential()
    if not token:
        raise ToolError.of(ErrorKind.AUTHENTICATION, MISSING_TOKEN_MESSAGE)

    tool = deps.get_tool(name)
    if tool is None:
        raise ToolError.of(ErrorKind.UNKNOWN_TOOL, f"Unknown tool: {name}")

    try:
        parsed = tool.arguments.model_validate(arguments)
    except ValidationError as exc:
        raise ToolError(normalize_error(exc)) from exc

    return await tool.handler(parsed, token)


async def handle_tool(
    name: str,
    arguments: Mapping[str, Any] | None,
    *,
    deps: ToolHandlerDeps,
    logger: logging.Logger,
) -> Any:
    """Validate, authorize and run one tool call.

    Returns the handler's result unchanged. Every failure surfaces as a single
    :class:`ToolError` whose ``kind`` says what went wrong; handler errors are
    normalized once and chained as ``__cause__``.

    Args:
        name: MCP tool name (``search_repositories``, ``create_issue``, etc.).
        arguments: Tool argument payload, or None when the client sent none.
    """
    request_id = generate_request_id()
    with trace_span(
        f"handle_tool/{name}",
        attributes={"gitbridge.tool": name, "gitbridge.request_id": request_id},
    ) as span:
        try:
            result = await _dispatch(name, arguments, deps)
        except Exception as exc:
            error = normalize_error(exc)
            set_attributes(
                span, {"gitbridge.outcome": "error", "gitbridge.error_kind": error.kind.value}
            )
            if error.kind is ErrorKind.GENERIC and not error.prefixed:
                logger.error(
                    "Tool %s failed: %s",
                    name,
                    error.message,
                    exc_info=exc,
                    extra={"request_id": request_id},
                )
            else:
                logger.warning(
                    "Tool %s failed with %s: %s",
                    name,
                    error.kind.value,
                    error.message,
                    extra={"request_id": request_id},
                )
            if isinstance(exc, ToolError):
                raise
            raise ToolError(error) from exc

        set_attributes(span, {"gitbridge.outcome": "success"})
        logger.info("Tool %s completed", name, extra={"request_id": request_id})
        return result
