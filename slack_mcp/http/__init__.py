"""Streamable HTTP transport for the Slack MCP server."""

from .main import MCP_PATH, create_app
from .sessions import Session, SessionRegistry, StreamableHttpSessions

__all__ = ["MCP_PATH", "Session", "SessionRegistry", "StreamableHttpSessions", "create_app"]
