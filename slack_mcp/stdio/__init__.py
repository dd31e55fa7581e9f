"""STDIO transport for the Slack MCP server."""

from .server import run_stdio

__all__ = ["run_stdio"]
