"""Session bookkeeping for the Streamable HTTP transport."""

from __future__ import annotations

import contextlib
import json
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from slack_mcp.observability import log_event
from slack_mcp.service.errors import CanonicalError

__all__ = ["ServerFactory", "Session", "SessionRegistry", "StreamableHttpSessions"]

ServerFactory = Callable[[str], Server]


@dataclass(slots=True)
class Session:
    """One client conversation bound to its own transport and server."""

    session_id: str
    transport: StreamableHTTPServerTransport
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionRegistry:
    """Mapping of session identifiers to live sessions.

    Only the event loop thread mutates the registry. ``discard`` reports
    whether it removed anything so each entry is released exactly once.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def ids(self) -> list[str]:
        return list(self._sessions)

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def register(self, session: Session) -> None:
        if session.session_id in self._sessions:
            raise ValueError(f"Session '{session.session_id}' is already registered")
        self._sessions[session.session_id] = session

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None


def _is_initialize_request(body: bytes) -> bool:
    try:
        message = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return False
    messages = message if isinstance(message, list) else [message]
    return any(isinstance(item, dict) and item.get("method") == "initialize" for item in messages)


def _without_session_header(scope: Scope) -> Scope:
    header = MCP_SESSION_ID_HEADER.encode("latin-1")
    headers = [(key, value) for key, value in scope.get("headers", []) if key.lower() != header]
    return {**scope, "headers": headers}


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class StreamableHttpSessions:
    """ASGI endpoint routing ``/mcp`` requests to per-session transports."""

    def __init__(
        self,
        server_factory: ServerFactory,
        *,
        registry: SessionRegistry | None = None,
        json_response: bool = False,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._server_factory = server_factory
        self.registry = registry if registry is not None else SessionRegistry()
        self._json_response = json_response
        self._id_factory = id_factory or (lambda: uuid4().hex)
        self._task_group: TaskGroup | None = None

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Own the task group hosting every session's server loop."""

        if self._task_group is not None:
            raise RuntimeError("StreamableHttpSessions is already running")
        async with anyio.create_task_group() as task_group:
            self._task_group = task_group
            try:
                yield
            finally:
                task_group.cancel_scope.cancel()
                self._task_group = None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session = self.registry.get(request.headers.get(MCP_SESSION_ID_HEADER))
        if session is not None:
            await session.transport.handle_request(scope, receive, send)
            if request.method == "DELETE" and session.transport.is_terminated:
                self.close(session.session_id)
            return

        if request.method != "POST":
            await self._reject(scope, receive, send, "Invalid or missing session ID")
            return

        body = await request.body()
        if not _is_initialize_request(body):
            await self._reject(scope, receive, send, "No valid session ID provided")
            return

        session = await self._open()
        await session.transport.handle_request(
            _without_session_header(scope), _replay(body, receive), send
        )

    def close(self, session_id: str) -> bool:
        """Forget ``session_id``; returns ``False`` when it was already gone."""

        removed = self.registry.discard(session_id)
        if removed:
            log_event(
                event="session.closed",
                transport="http",
                status="ok",
                session_id=session_id,
                active_sessions=len(self.registry),
            )
        return removed

    async def _open(self) -> Session:
        if self._task_group is None:
            raise RuntimeError("StreamableHttpSessions.run() must be active to open sessions")

        session_id = self._id_factory()
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self._json_response,
        )
        server = self._server_factory(session_id)
        session = Session(session_id=session_id, transport=transport)
        self.registry.register(session)

        async def run_server(*, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
            try:
                async with transport.connect() as (read_stream, write_stream):
                    task_status.started()
                    await server.run(
                        read_stream,
                        write_stream,
                        server.create_initialization_options(),
                        stateless=False,
                    )
            finally:
                self.close(session_id)

        await self._task_group.start(run_server)
        log_event(
            event="session.opened",
            transport="http",
            status="ok",
            session_id=session_id,
            active_sessions=len(self.registry),
        )
        return session

    async def _reject(self, scope: Scope, receive: Receive, send: Send, detail: str) -> None:
        error: dict[str, Any] = CanonicalError.to_jsonrpc_error("INVALID_SESSION")
        error["message"] = f"Bad Request: {detail}"
        log_event(event="session.rejected", transport="http", status="error", detail=detail)
        response = JSONResponse(
            {"jsonrpc": "2.0", "id": None, "error": error},
            status_code=CanonicalError.to_http_status("INVALID_SESSION"),
        )
        await response(scope, receive, send)
