"""Service layer for the Slack MCP server (lazy exports)."""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

__all__ = [
    "CanonicalError",
    "Dispatcher",
    "Operation",
    "SlackGateway",
    "ToolCatalog",
    "ToolError",
    "ToolResult",
]

_EXPORT_MAP = {
    "CanonicalError": "slack_mcp.service.errors",
    "Dispatcher": "slack_mcp.service.dispatcher",
    "Operation": "slack_mcp.service.catalog",
    "SlackGateway": "slack_mcp.service.gateway",
    "ToolCatalog": "slack_mcp.service.catalog",
    "ToolError": "slack_mcp.service.errors",
    "ToolResult": "slack_mcp.service.envelope",
}

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .catalog import Operation, ToolCatalog
    from .dispatcher import Dispatcher
    from .envelope import ToolResult
    from .errors import CanonicalError, ToolError
    from .gateway import SlackGateway


def __getattr__(name: str):  # pragma: no cover - thin loader
    if name not in _EXPORT_MAP:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORT_MAP[name])
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:  # pragma: no cover - thin loader
    return sorted(set(globals()) | set(__all__))
