"""MCP server exposing GitHub tools over SSE."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from types import FrameType
from typing import Any

import uvicorn
from dotenv import load_dotenv
from mcp import types
from mcp.server import Server
from mcp.types import TextContent, Tool

from gitbridge import __version__, tool_handlers
from gitbridge.credentials import CredentialStore, credential_store
from gitbridge.errors import ToolError
from gitbridge.tools import build_tools, get_tool
from gitbridge.transport import SessionTransport

server = Server("github-mcp-server", version=__version__)

logger = logging.getLogger("gitbridge")

DEFAULT_PORT = 9000
DEFAULT_HOST = "0.0.0.0"


def _configure_logging() -> None:
    level = os.environ.get("GITBRIDGE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@server.list_tools()
async def list_tools() -> list[Tool]:
    """Publish every registered GitHub tool."""
    return build_tools()


def _build_tool_handler_deps() -> tool_handlers.ToolHandlerDeps:
    return tool_handlers.ToolHandlerDeps(
        get_tool=get_tool,
        get_credential=credential_store.get_active_credential,
    )


async def handle_tool(name: str, arguments: dict[str, Any] | None) -> Any:
    """Dispatch a tool invocation against the process-wide credential.

    Separated from ``call_tool`` so tests can invoke tool logic without the
    MCP request plumbing.
    """
    return await tool_handlers.handle_tool(
        name,
        arguments,
        deps=_build_tool_handler_deps(),
        logger=logger,
    )


async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
    """MCP tool handler: JSON result on success, ``isError`` frame on failure."""
    try:
        result = await handle_tool(request.params.name, request.params.arguments)
    except ToolError as exc:
        return types.ServerResult(
            types.CallToolResult(
                content=[TextContent(type="text", text=str(exc))],
                isError=True,
            )
        )
    return types.ServerResult(types.CallToolResult(content=tool_handlers.json_text(result)))


# Registered directly rather than via ``@server.call_tool()`` so that a request
# without ``arguments`` reaches the dispatcher as None instead of {}.
server.request_handlers[types.CallToolRequest] = call_tool


async def run_session(read_stream: Any, write_stream: Any) -> None:
    """Serve MCP over one SSE session's streams until it disconnects."""
    await server.run(
        read_stream,
        write_stream,
        server.create_initialization_options(),
    )


def create_transport(store: CredentialStore | None = None) -> SessionTransport:
    return SessionTransport(run_session, store or credential_store)


class _GracefulServer(uvicorn.Server):
    """Closes the active SSE session before uvicorn's graceful shutdown."""

    def __init__(self, config: uvicorn.Config, transport: SessionTransport) -> None:
        super().__init__(config)
        self._transport = transport
        self._loop: asyncio.AbstractEventLoop | None = None

    async def serve(self, sockets: Any = None) -> None:
        self._loop = asyncio.get_running_loop()
        await super().serve(sockets)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._transport.close)
        super().handle_exit(sig, frame)


async def run(host: str, port: int) -> None:
    """Serve the SSE app until interrupted."""
    transport = create_transport()
    config = uvicorn.Config(
        transport.app,
        host=host,
        port=port,
        log_level=logging.getLevelName(logging.getLogger().level).lower(),
        access_log=False,
    )
    logger.info("GitHub MCP Server running on port %s", port)
    await _GracefulServer(config, transport).serve()


def main() -> None:
    """CLI entry point: load configuration then serve until SIGINT/SIGTERM."""
    load_dotenv()
    credential_store.reload_env()
    _configure_logging()
    try:
        port = int(os.environ.get("PORT", DEFAULT_PORT))
        host = os.environ.get("GITBRIDGE_HOST", DEFAULT_HOST)
        asyncio.run(run(host, port))
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        logger.critical("Fatal error in main(): %s", exc, exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
