"""STDIO transport for the Slack MCP server."""

from __future__ import annotations

from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from slack_mcp.observability import log_event

__all__ = ["run_stdio"]


async def run_stdio(server: Server) -> None:
    """Serve ``server`` over stdin/stdout until the client disconnects."""

    async with stdio_server() as (read_stream, write_stream):
        log_event(event="transport.started", transport="stdio", status="ok")
        await server.run(read_stream, write_stream, server.create_initialization_options())
    log_event(event="transport.stopped", transport="stdio", status="ok")
