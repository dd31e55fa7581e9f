from __future__ import annotations

from pathlib import Path

import pytest

from slack_mcp.service.catalog import CatalogError, ToolCatalog
from slack_mcp.validation import SchemaRegistry

EXPECTED_ORDER = [
    "slack_list_channels",
    "slack_post_message",
    "slack_reply_to_thread",
    "slack_add_reaction",
    "slack_get_channel_history",
    "slack_get_thread_replies",
    "slack_get_users",
    "slack_get_user_profile",
    "slack_get_user_profiles",
    "slack_search_messages",
    "slack_upload_file",
    "slack_list_files",
    "slack_get_file_info",
    "slack_delete_file",
    "slack_send_file",
]


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "tools.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_catalog_lists_every_tool_in_declared_order(catalog: ToolCatalog) -> None:
    assert len(catalog) == 15
    assert catalog.names() == EXPECTED_ORDER


def test_catalog_is_stable_between_calls(catalog: ToolCatalog) -> None:
    first = [tool.model_dump() for tool in catalog.to_tools()]
    second = [tool.model_dump() for tool in catalog.to_tools()]

    assert first == second


def test_tools_carry_description_and_input_schema(
    catalog: ToolCatalog, registry: SchemaRegistry
) -> None:
    tool = catalog.get("slack_post_message").to_tool()

    assert tool.name == "slack_post_message"
    assert tool.description == "Post a new message to a Slack channel (optionally with files)"
    assert tool.inputSchema == registry.input_schema("slack_post_message")
    for tool in catalog.to_tools():
        assert tool.description
        assert tool.inputSchema["type"] == "object"


def test_missing_catalog_file(registry: SchemaRegistry, tmp_path: Path) -> None:
    with pytest.raises(CatalogError, match="not found"):
        ToolCatalog.load(registry, tmp_path / "absent.yaml")


def test_catalog_requires_tools_list(registry: SchemaRegistry, tmp_path: Path) -> None:
    with pytest.raises(CatalogError, match="'tools' list"):
        ToolCatalog.load(registry, _write(tmp_path, "version: 1\n"))


def test_catalog_rejects_invalid_yaml(registry: SchemaRegistry, tmp_path: Path) -> None:
    with pytest.raises(CatalogError, match="Failed to parse"):
        ToolCatalog.load(registry, _write(tmp_path, "tools: [\n"))


def test_catalog_rejects_duplicates(registry: SchemaRegistry, tmp_path: Path) -> None:
    body = (
        "tools:\n"
        "  - name: slack_get_users\n    description: one\n"
        "  - name: slack_get_users\n    description: two\n"
    )

    with pytest.raises(CatalogError, match="Duplicate"):
        ToolCatalog.load(registry, _write(tmp_path, body))


def test_catalog_rejects_unregistered_tool(registry: SchemaRegistry, tmp_path: Path) -> None:
    body = "tools:\n  - name: slack_archive_channel\n    description: Archive\n"

    with pytest.raises(CatalogError, match="no registered schemas"):
        ToolCatalog.load(registry, _write(tmp_path, body))


def test_catalog_rejects_blank_description(registry: SchemaRegistry, tmp_path: Path) -> None:
    body = "tools:\n  - name: slack_get_users\n    description: ''\n"

    with pytest.raises(CatalogError, match="description"):
        ToolCatalog.load(registry, _write(tmp_path, body))


def test_partial_catalog_warns_about_missing_tools(
    registry: SchemaRegistry, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    body = "tools:\n  - name: slack_get_users\n    description: Get users\n"

    with caplog.at_level("WARNING", logger="slack_mcp.service.catalog"):
        catalog = ToolCatalog.load(registry, _write(tmp_path, body))

    assert catalog.names() == ["slack_get_users"]
    assert "slack_list_channels" in caplog.text


def test_operations_carry_their_models(catalog: ToolCatalog) -> None:
    operation = catalog.get("slack_search_messages")

    assert operation.schemas.request.__name__ == "SearchMessagesRequest"
    assert operation.schemas.response.__name__ == "SearchMessagesResponse"
    assert catalog.get("slack_delete_file").schemas.response is None
