from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

from fastapi import FastAPI

from slack_mcp import __version__

from .routes import build_router
from .sessions import StreamableHttpSessions

__all__ = ["MCP_PATH", "create_app"]

MCP_PATH = "/mcp"


def create_app(sessions: StreamableHttpSessions, *, enable_openapi: bool = False) -> FastAPI:
    """Return a FastAPI application exposing the Streamable HTTP endpoints."""

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        async with sessions.run():
            yield

    docs_url = "/docs" if enable_openapi else None
    openapi_url = "/openapi.json" if enable_openapi else None
    app = FastAPI(
        title="Slack MCP Server",
        version=__version__,
        docs_url=docs_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )
    app.include_router(build_router())
    app.add_route(MCP_PATH, sessions, methods=["GET", "POST", "DELETE"], include_in_schema=False)
    app.state.sessions = sessions
    return app
