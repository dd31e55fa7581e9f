"""Slack MCP server: Slack Web API operations exposed as MCP tools."""

__version__ = "0.1.0"

__all__ = ["__version__"]
