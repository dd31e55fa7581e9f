"""Bind a :class:`Dispatcher` to an MCP protocol server."""

from __future__ import annotations

from mcp import types
from mcp.server.lowlevel import Server

from slack_mcp import __version__
from slack_mcp.service.dispatcher import Dispatcher

__all__ = ["SERVER_NAME", "create_server"]

SERVER_NAME = "slack-mcp-server"


def _error_result(message: str) -> types.ServerResult:
    return types.ServerResult(
        types.CallToolResult(
            content=[types.TextContent(type="text", text=message)],
            isError=True,
        )
    )


def create_server(dispatcher: Dispatcher) -> Server:
    """Return a protocol server exposing the Slack tools through ``dispatcher``."""

    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return dispatcher.list_tools()

    # Registered directly so an absent argument bag reaches the dispatcher as None.
    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        try:
            result = await dispatcher.dispatch(request.params.name, request.params.arguments)
        except Exception as exc:  # noqa: BLE001
            return _error_result(str(exc))
        return types.ServerResult(types.CallToolResult(content=result.to_content()))

    server.request_handlers[types.CallToolRequest] = call_tool
    return server
