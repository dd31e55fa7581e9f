"""Structured invocation logs for the Slack MCP server."""

from __future__ import annotations

import itertools
import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO
from uuid import uuid4

__all__ = ["INVOCATION_LOG_NAME", "InvocationLogEvent", "JsonLogWriter"]

INVOCATION_LOG_NAME = "tool_invocations.jsonl"


@dataclass
class InvocationLogEvent:
    """One ``tool.invoke`` / ``tool.ok`` / ``tool.err`` record."""

    ts: datetime
    trace_id: str
    tool: str
    event: str
    status: str
    duration_ms: float
    transport: str
    session_id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    error: Mapping[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        ts = self.ts if self.ts.tzinfo is not None else self.ts.replace(tzinfo=timezone.utc)
        return {
            "ts": ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
            "trace_id": self.trace_id,
            "tool": self.tool,
            "event": self.event,
            "status": self.status,
            "duration_ms": float(self.duration_ms),
            "transport": self.transport,
            "session_id": self.session_id,
            "metadata": dict(self.metadata),
            "error": dict(self.error) if self.error is not None else None,
        }


class JsonLogWriter:
    """Append invocation events to a single JSONL file.

    Existing content is never truncated or removed; each process run is
    told apart by the ``run_id`` stamped on its lines, and ``sequence``
    orders the lines within a run.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.run_id = uuid4().hex
        self._sequence = itertools.count()
        self._lock = threading.Lock()
        self._handle: TextIO | None = self.path.open("a", encoding="utf-8")

    @classmethod
    def in_directory(cls, directory: str | Path) -> JsonLogWriter:
        return cls(Path(directory) / INVOCATION_LOG_NAME)

    @property
    def closed(self) -> bool:
        return self._handle is None

    def write(self, event: InvocationLogEvent) -> None:
        with self._lock:
            if self._handle is None:
                raise ValueError(f"JsonLogWriter for {self.path} is closed")
            payload = event.to_payload()
            payload["run_id"] = self.run_id
            payload["sequence"] = next(self._sequence)
            self._handle.write(json.dumps(payload, sort_keys=True, ensure_ascii=False) + "\n")
            self._handle.flush()

    def close(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    def __enter__(self) -> JsonLogWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
