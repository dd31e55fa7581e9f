"""Unit tests for :mod:`slack_mcp.validation.schema_registry`."""

from __future__ import annotations

import pytest
from jsonschema import Draft202012Validator

from slack_mcp.service.errors import ToolOutputError, ToolValidationError, UnknownToolError
from slack_mcp.validation import DEFAULT_TOOL_SCHEMAS, SchemaRegistry

LIMITED_TOOLS = {
    "slack_list_channels": {},
    "slack_get_channel_history": {"channel_id": "C1"},
    "slack_get_thread_replies": {"channel_id": "C1", "thread_ts": "1234567890.123456"},
    "slack_get_users": {},
    "slack_list_files": {},
}


def test_registry_covers_every_tool() -> None:
    registry = SchemaRegistry()

    assert len(registry.tool_names()) == 15
    assert set(registry.tool_names()) == set(DEFAULT_TOOL_SCHEMAS)
    assert "slack_post_message" in registry
    assert "slack_unknown" not in registry


@pytest.mark.parametrize("tool", sorted(LIMITED_TOOLS))
@pytest.mark.parametrize(
    ("limit", "accepted"), [(0, False), (1, True), (1000, True), (1001, False)]
)
def test_listing_limit_bounds(
    registry: SchemaRegistry, tool: str, limit: int, accepted: bool
) -> None:
    arguments = {**LIMITED_TOOLS[tool], "limit": limit}

    if accepted:
        assert registry.validate_input(tool, arguments).limit == limit
    else:
        with pytest.raises(ToolValidationError) as exc_info:
            registry.validate_input(tool, arguments)
        assert exc_info.value.violations[0][0] == "limit"


@pytest.mark.parametrize("tool", sorted(LIMITED_TOOLS))
def test_listing_limit_defaults_to_one_hundred(registry: SchemaRegistry, tool: str) -> None:
    request = registry.validate_input(tool, dict(LIMITED_TOOLS[tool]))

    assert request.limit == 100
    assert request.cursor is None


@pytest.mark.parametrize("field", ["count", "page"])
@pytest.mark.parametrize(("value", "accepted"), [(0, False), (1, True), (100, True), (101, False)])
def test_search_paging_bounds(
    registry: SchemaRegistry, field: str, value: int, accepted: bool
) -> None:
    arguments = {"query": "hello", field: value}

    if accepted:
        assert getattr(registry.validate_input("slack_search_messages", arguments), field) == value
    else:
        with pytest.raises(ToolValidationError):
            registry.validate_input("slack_search_messages", arguments)


def test_search_defaults(registry: SchemaRegistry) -> None:
    request = registry.validate_input("slack_search_messages", {"query": "hello"})

    assert request.highlight is False
    assert request.sort == "score"
    assert request.sort_dir == "desc"
    assert request.count == 20
    assert request.page == 1


def test_search_rejects_unknown_sort(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolValidationError):
        registry.validate_input("slack_search_messages", {"query": "x", "sort": "relevance"})


@pytest.mark.parametrize(("size", "accepted"), [(0, False), (1, True), (100, True), (101, False)])
def test_user_profiles_batch_bounds(registry: SchemaRegistry, size: int, accepted: bool) -> None:
    arguments = {"user_ids": [f"U{index}" for index in range(size)]}

    if accepted:
        request = registry.validate_input("slack_get_user_profiles", arguments)
        assert len(request.user_ids) == size
    else:
        with pytest.raises(ToolValidationError):
            registry.validate_input("slack_get_user_profiles", arguments)


@pytest.mark.parametrize(
    ("timestamp", "accepted"),
    [
        ("1234567890.123456", True),
        ("1234567890", False),
        ("123456789.123456", False),
        ("1234567890.12345", False),
        ("1234567890.1234567", False),
        ("abcdefghij.123456", False),
        ("\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669\u0660.\u0661\u0662\u0663\u0664\u0665\u0666", False),
        ("１２３４５６７８９０.１２３４５６", False),
    ],
)
def test_thread_timestamp_pattern(registry: SchemaRegistry, timestamp: str, accepted: bool) -> None:
    arguments = {"channel_id": "C1", "thread_ts": timestamp, "text": "hi"}

    if accepted:
        registry.validate_input("slack_reply_to_thread", arguments)
    else:
        with pytest.raises(ToolValidationError) as exc_info:
            registry.validate_input("slack_reply_to_thread", arguments)
        assert exc_info.value.violations[0][0] == "thread_ts"


def test_reaction_timestamp_pattern(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolValidationError):
        registry.validate_input(
            "slack_add_reaction",
            {"channel_id": "C1", "timestamp": "1234567890", "reaction": "tada"},
        )


def test_strict_types_are_not_coerced(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolValidationError):
        registry.validate_input("slack_list_channels", {"limit": "5"})
    with pytest.raises(ToolValidationError):
        registry.validate_input("slack_list_channels", {"limit": True})


def test_every_violation_is_reported(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolValidationError) as exc_info:
        registry.validate_input("slack_post_message", {})

    fields = {field for field, _ in exc_info.value.violations}
    assert fields == {"channel_id", "text"}
    assert "channel_id" in exc_info.value.message
    assert "text" in exc_info.value.message


def test_unknown_argument_keys_are_ignored(registry: SchemaRegistry) -> None:
    request = registry.validate_input("slack_get_user_profile", {"user_id": "U1", "extra": 1})

    assert request.model_dump() == {"user_id": "U1"}


def test_missing_arguments_are_rejected(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolValidationError) as exc_info:
        registry.validate_input("slack_list_channels", None)

    assert exc_info.value.violations == (("arguments", "Arguments are required"),)


def test_unknown_tool_is_reported(registry: SchemaRegistry) -> None:
    with pytest.raises(UnknownToolError) as exc_info:
        registry.validate_input("slack_unknown", {})

    assert exc_info.value.message == "Unknown tool: slack_unknown"


def test_output_drops_undeclared_fields(registry: SchemaRegistry) -> None:
    payload = {
        "ok": True,
        "warning": "superfluous_charset",
        "channels": [{"id": "C1", "name": "general", "is_member": True, "shared_team_ids": []}],
        "response_metadata": {"next_cursor": "abc", "scopes": ["channels:read"]},
    }

    shaped = registry.validate_output("slack_list_channels", payload)

    assert shaped.model_dump(exclude_unset=True) == {
        "ok": True,
        "channels": [{"id": "C1", "name": "general"}],
        "response_metadata": {"next_cursor": "abc"},
    }


def test_output_rejects_incompatible_payload(registry: SchemaRegistry) -> None:
    with pytest.raises(ToolOutputError) as exc_info:
        registry.validate_output("slack_list_channels", {"ok": True, "channels": "nope"})

    assert exc_info.value.code == "INVALID_OUTPUT"


def test_output_requires_declared_shape(registry: SchemaRegistry) -> None:
    with pytest.raises(KeyError):
        registry.validate_output("slack_post_message", {"ok": True})


@pytest.mark.parametrize("tool", sorted(DEFAULT_TOOL_SCHEMAS))
def test_input_schemas_are_valid_json_schema(registry: SchemaRegistry, tool: str) -> None:
    schema = registry.input_schema(tool)

    Draft202012Validator.check_schema(schema)
    assert schema["type"] == "object"


def test_input_schema_publishes_bounds_and_defaults(registry: SchemaRegistry) -> None:
    limit = registry.input_schema("slack_list_channels")["properties"]["limit"]

    assert limit["default"] == 100
    assert limit["minimum"] == 1
    assert limit["maximum"] == 1000

    required = registry.input_schema("slack_reply_to_thread")["required"]
    assert set(required) == {"channel_id", "thread_ts", "text"}


def test_fingerprint_is_stable(registry: SchemaRegistry) -> None:
    first = registry.fingerprint("slack_search_messages")

    assert first == SchemaRegistry().fingerprint("slack_search_messages")
    assert first != registry.fingerprint("slack_list_channels")
    assert len(first) == 64
