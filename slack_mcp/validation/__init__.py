"""Request/response validation for the Slack tools."""

from .schema_registry import DEFAULT_TOOL_SCHEMAS, SchemaRegistry, ToolSchemas

__all__ = ["DEFAULT_TOOL_SCHEMAS", "SchemaRegistry", "ToolSchemas"]
