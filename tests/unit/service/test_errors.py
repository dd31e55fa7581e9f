from __future__ import annotations

import pytest

from slack_mcp.service.errors import (
    CanonicalError,
    SlackRequestError,
    ToolOutputError,
    ToolValidationError,
    UnknownToolError,
)


@pytest.mark.parametrize(
    ("code", "http_status", "jsonrpc_code"),
    [
        ("INVALID_INPUT", 400, -32602),
        ("INVALID_OUTPUT", 502, -32002),
        ("NOT_FOUND", 404, -32004),
        ("UPSTREAM_ERROR", 502, -32005),
        ("INVALID_SESSION", 400, -32000),
        ("INTERNAL_ERROR", 500, -32603),
    ],
)
def test_canonical_mappings(code: str, http_status: int, jsonrpc_code: int) -> None:
    assert CanonicalError.to_http_status(code) == http_status
    error = CanonicalError.to_jsonrpc_error(code)
    assert error["code"] == jsonrpc_code
    assert error["data"] == {
        "canonical": code,
        "httpStatus": http_status,
        "message": error["message"],
    }


def test_jsonrpc_payloads_are_not_shared() -> None:
    first = CanonicalError.to_jsonrpc_error("INVALID_SESSION")
    first["message"] = "changed"

    assert CanonicalError.to_jsonrpc_error("INVALID_SESSION")["message"] == (
        "Bad Request: No valid session ID provided"
    )


def test_unknown_code_raises() -> None:
    with pytest.raises(KeyError):
        CanonicalError.to_http_status("TEAPOT")


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (UnknownToolError("x"), "NOT_FOUND"),
        (ToolValidationError("x", [("limit", "too big")]), "INVALID_INPUT"),
        (ToolOutputError("x", [("channels", "bad")]), "INVALID_OUTPUT"),
        (SlackRequestError("list channels", "invalid_auth"), "UPSTREAM_ERROR"),
    ],
)
def test_tool_errors_map_to_canonical_codes(error, code: str) -> None:
    assert error.code == code
    assert error.code in CanonicalError.codes()
    assert error.to_dict()["code"] == code


def test_validation_error_lists_every_violation() -> None:
    error = ToolValidationError(
        "slack_post_message", [("channel_id", "Field required"), ("text", "Field required")]
    )

    assert str(error) == (
        "Invalid arguments for slack_post_message: "
        "channel_id: Field required; text: Field required"
    )
    assert error.to_dict()["details"] == {
        "violations": [["channel_id", "Field required"], ["text", "Field required"]]
    }


def test_slack_request_error_message() -> None:
    error = SlackRequestError("get users", "ratelimited")

    assert str(error) == "Failed to get users: ratelimited"
    assert error.error == "ratelimited"
