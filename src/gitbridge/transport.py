"""SSE session transport: connection credentials and the session lifecycle.

The transport tracks a single session. A new ``GET /sse`` replaces whatever
session was tracked before, so message posts are always routed to the most
recently opened stream; clients of older streams stop receiving replies.
This is a capacity of one concurrent client, not a keyed session registry.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import anyio
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from gitbridge.credentials import CredentialError, CredentialStore, MissingEncryptionKeyError

logger = logging.getLogger("gitbridge.transport")

SessionRunner = Callable[[Any, Any], Awaitable[None]]


class TransportState(str, enum.Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    CLOSED = "closed"


class SessionState(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Session:
    """One live SSE stream and the scope that cancels it on shutdown."""

    transport: SseServerTransport
    state: SessionState = SessionState.OPEN
    opened_at: float = field(default_factory=time.monotonic)
    cancel_scope: anyio.CancelScope | None = None


class _MessageEndpoint:
    """Raw ASGI endpoint so the SDK transport can write its own response."""

    def __init__(self, owner: SessionTransport) -> None:
        self._owner = owner

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._owner.handle_post_message(scope, receive, send)


class SessionTransport:
    """Starlette app serving ``GET /sse`` and ``POST /message``.

    States: ``IDLE`` until a stream opens, ``CONNECTED`` while one is tracked,
    back to ``IDLE`` when it disconnects, and ``CLOSED`` (terminal) after
    :meth:`close`.
    """

    def __init__(
        self,
        run_session: SessionRunner,
        store: CredentialStore,
        *,
        sse_path: str = "/sse",
        message_path: str = "/message",
    ) -> None:
        self._run_session = run_session
        self._store = store
        self._message_path = message_path
        self._session: Session | None = None
        self.state = TransportState.IDLE
        self.app = Starlette(
            routes=[
                Route(sse_path, endpoint=self.handle_sse, methods=["GET"]),
                Route(message_path, endpoint=_MessageEndpoint(self), methods=["POST"]),
            ],
            lifespan=self._lifespan,
        )

    @property
    def active_session(self) -> Session | None:
        return self._session

    @contextlib.asynccontextmanager
    async def _lifespan(self, _app: Starlette) -> AsyncIterator[None]:
        yield
        self.close()

    def apply_credentials(self, params: Mapping[str, str]) -> None:
        """Install the credential carried by the stream-open query string.

        Raises:
            CredentialError: If an encrypted token cannot be decrypted; the
                credential store is left as it was.
        """
        token = params.get("token")
        if not token:
            logger.info(
                "No access token provided by client, will use environment variable if available"
            )
            self._store.clear_dynamic_credential()
            return
        if params.get("encrypted") == "true":
            logger.info("Encrypted access token received from client")
            self._store.set_encrypted_credential(token, params.get("encryption_key"))
        else:
            logger.info("Plain text access token received from client")
            self._store.set_dynamic_credential(token)

    async def handle_sse(self, request: Request) -> Response:
        logger.info("Received SSE connection")
        if self.state is TransportState.CLOSED:
            return JSONResponse({"error": "Server is shutting down"}, status_code=503)
        try:
            self.apply_credentials(request.query_params)
        except MissingEncryptionKeyError as exc:
            logger.error("Encryption key not provided for encrypted token")
            return JSONResponse({"error": str(exc)}, status_code=400)
        except CredentialError as exc:
            logger.error("Failed to process token: %s", exc)
            return JSONResponse({"error": f"Failed to process token: {exc}"}, status_code=400)

        session = Session(SseServerTransport(self._message_path))
        self._open(session)
        try:
            with anyio.CancelScope() as scope:
                session.cancel_scope = scope
                async with session.transport.connect_sse(
                    request.scope, request.receive, request._send
                ) as (read_stream, write_stream):
                    await self._run_session(read_stream, write_stream)
        finally:
            self._release(session)
        return Response()

    async def handle_post_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        session = self._session
        if session is None:
            logger.error("SSE connection not established")
            response = JSONResponse({"error": "SSE connection not established"}, status_code=500)
            await response(scope, receive, send)
            return
        await session.transport.handle_post_message(scope, receive, send)

    def _open(self, session: Session) -> None:
        previous = self._session
        if previous is not None:
            logger.warning("New SSE connection replaces the active session")
        self._session = session
        self.state = TransportState.CONNECTED

    def _release(self, session: Session) -> None:
        session.state = SessionState.CLOSED
        if self._session is session:
            self._session = None
            if self.state is TransportState.CONNECTED:
                self.state = TransportState.IDLE
        logger.info("SSE session closed")

    def close(self) -> None:
        """Cancel the active session and refuse new ones."""
        if self.state is TransportState.CLOSED:
            return
        self.state = TransportState.CLOSED
        session, self._session = self._session, None
        if session is not None:
            session.state = SessionState.CLOSED
            if session.cancel_scope is not None:
                session.cancel_scope.cancel()
        logger.info("SSE transport closed")


__all__ = ["Session", "SessionState", "SessionTransport", "TransportState"]
