"""Structured logging utilities for the Slack MCP server."""

from __future__ import annotations

import json
import logging
from typing import Any

LOGGER_NAME = "slack_mcp"

logger = logging.getLogger(LOGGER_NAME)


def log_event(*, event: str, transport: str, status: str, **extra: Any) -> None:
    """Emit a JSON log line describing a server event."""

    payload: dict[str, Any] = {
        "event": event,
        "transport": transport,
        "status": status,
    }
    for key, value in extra.items():
        if value is not None:
            payload[key] = value
    level = logging.INFO if status == "ok" else logging.WARNING
    logger.log(level, json.dumps(payload, sort_keys=True, default=str))
