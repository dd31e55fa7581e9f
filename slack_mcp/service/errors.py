from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

__all__ = [
    "CanonicalError",
    "SlackRequestError",
    "ToolError",
    "ToolOutputError",
    "ToolValidationError",
    "UnknownToolError",
]


@dataclass(frozen=True)
class _CanonicalSpec:
    code: str
    description: str
    http_status: int
    jsonrpc_code: int
    message: str


@dataclass(frozen=True)
class _JsonRpcErrorTemplate:
    """Immutable template describing JSON-RPC error payload fields."""

    code: int
    message: str

    def build_payload(self, *, canonical_code: str, http_status: int) -> dict[str, object]:
        """Materialise a JSON-RPC error payload without sharing state."""

        return {
            "code": self.code,
            "message": self.message,
            "data": {
                "canonical": canonical_code,
                "httpStatus": http_status,
                "message": self.message,
            },
        }


class CanonicalError:
    """Canonical error codes used across transports."""

    _SPECS: tuple[_CanonicalSpec, ...] = (
        _CanonicalSpec(
            "INVALID_INPUT",
            "Tool arguments failed validation",
            400,
            -32602,
            "Invalid input payload",
        ),
        _CanonicalSpec(
            "INVALID_OUTPUT",
            "Slack returned a payload that failed validation",
            502,
            -32002,
            "Invalid output payload",
        ),
        _CanonicalSpec(
            "NOT_FOUND",
            "Requested tool was not found",
            404,
            -32004,
            "Tool not found",
        ),
        _CanonicalSpec(
            "UPSTREAM_ERROR",
            "Slack answered with ok=false",
            502,
            -32005,
            "Slack API request failed",
        ),
        _CanonicalSpec(
            "INVALID_SESSION",
            "Session identifier missing, unknown or already closed",
            400,
            -32000,
            "Bad Request: No valid session ID provided",
        ),
        _CanonicalSpec(
            "INTERNAL_ERROR",
            "Unexpected server-side failure",
            500,
            -32603,
            "Internal server error",
        ),
    )

    _HTTP_STATUS_MAP: dict[str, int] = {spec.code: spec.http_status for spec in _SPECS}
    _JSONRPC_MAP: dict[str, _JsonRpcErrorTemplate] = {
        spec.code: _JsonRpcErrorTemplate(code=spec.jsonrpc_code, message=spec.message)
        for spec in _SPECS
    }

    @classmethod
    def codes(cls) -> Sequence[str]:
        return tuple(spec.code for spec in cls._SPECS)

    @staticmethod
    def _lookup(code: str, mapping: Mapping[str, object], *, context: str | None = None) -> object:
        if code not in mapping:
            raise KeyError(f"{code} does not have a mapping for {context or 'requested lookup'}")
        return mapping[code]

    @classmethod
    def to_http_status(cls, code: str) -> int:
        value = cls._lookup(code, cls._HTTP_STATUS_MAP, context="HTTP status")
        if not isinstance(value, int):  # pragma: no cover - defensive
            raise TypeError("HTTP status mapping must be an integer")
        return value

    @classmethod
    def to_jsonrpc_error(cls, code: str) -> dict[str, object]:
        template = cls._lookup(code, cls._JSONRPC_MAP, context="JSON-RPC error")
        if not isinstance(template, _JsonRpcErrorTemplate):  # pragma: no cover - defensive
            raise TypeError("JSON-RPC mapping must be a _JsonRpcErrorTemplate")
        http_status = cls.to_http_status(code)
        return template.build_payload(canonical_code=code, http_status=http_status)


class ToolError(Exception):
    """Base class for failures of a single tool invocation."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class UnknownToolError(ToolError):
    code = "NOT_FOUND"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}", details={"tool": tool_name})
        self.tool_name = tool_name


class ToolValidationError(ToolError):
    """Raised when tool arguments violate the declared request shape.

    ``violations`` holds one ``(field, constraint)`` pair per problem so
    callers can report every violation at once.
    """

    code = "INVALID_INPUT"

    def __init__(self, tool_name: str, violations: Sequence[tuple[str, str]]) -> None:
        self.tool_name = tool_name
        self.violations = tuple(violations)
        summary = "; ".join(f"{field}: {constraint}" for field, constraint in self.violations)
        super().__init__(
            f"Invalid arguments for {tool_name}: {summary}",
            details={"violations": [list(item) for item in self.violations]},
        )


class ToolOutputError(ToolError):
    code = "INVALID_OUTPUT"

    def __init__(self, tool_name: str, violations: Sequence[tuple[str, str]]) -> None:
        self.tool_name = tool_name
        self.violations = tuple(violations)
        summary = "; ".join(f"{field}: {constraint}" for field, constraint in self.violations)
        super().__init__(f"Unexpected Slack response for {tool_name}: {summary}")


class SlackRequestError(ToolError):
    """Raised when Slack answers a call with ``ok: false``."""

    code = "UPSTREAM_ERROR"

    def __init__(self, action: str, error: str) -> None:
        super().__init__(f"Failed to {action}: {error}", details={"slack_error": error})
        self.action = action
        self.error = error
