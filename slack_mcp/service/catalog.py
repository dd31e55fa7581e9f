"""Static catalog of the tools advertised to MCP clients."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from mcp import types

from slack_mcp.validation import SchemaRegistry, ToolSchemas

__all__ = ["CatalogError", "DEFAULT_CATALOG_PATH", "Operation", "ToolCatalog"]

LOGGER = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "tools.yaml"


class CatalogError(Exception):
    """Raised when the tool catalog definition is malformed."""


@dataclass(frozen=True)
class Operation:
    """A named tool with its description, published input schema and models."""

    name: str
    description: str
    input_schema: Mapping[str, Any]
    schemas: ToolSchemas

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=dict(self.input_schema),
        )


class ToolCatalog:
    """Load the catalog definition once and serve it unchanged afterwards."""

    def __init__(self, operations: list[Operation]) -> None:
        self._operations = tuple(operations)
        self._by_name = {operation.name: operation for operation in self._operations}

    @classmethod
    def load(
        cls,
        registry: SchemaRegistry,
        path: Path | str = DEFAULT_CATALOG_PATH,
    ) -> ToolCatalog:
        source = Path(path)
        if not source.exists():
            raise CatalogError(f"Tool catalog not found: {source}")
        with source.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise CatalogError(f"Failed to parse tool catalog {source}: {exc}") from exc

        if not isinstance(data, Mapping) or not isinstance(data.get("tools"), list):
            raise CatalogError(f"Tool catalog {source} must contain a 'tools' list")

        operations: list[Operation] = []
        seen: set[str] = set()
        for index, entry in enumerate(data["tools"]):
            if not isinstance(entry, Mapping):
                raise CatalogError(f"Tool entry #{index} in {source} must be a mapping")
            name = _require_str(entry.get("name"), "name", source)
            description = _require_str(entry.get("description"), "description", source)
            if name in seen:
                raise CatalogError(f"Duplicate tool name '{name}' found in {source}")
            if name not in registry:
                raise CatalogError(f"Tool '{name}' in {source} has no registered schemas")
            seen.add(name)
            schema = MappingProxyType(registry.input_schema(name))
            operations.append(
                Operation(
                    name=name,
                    description=description,
                    input_schema=schema,
                    schemas=registry.schemas_for(name),
                )
            )

        missing = [name for name in registry.tool_names() if name not in seen]
        if missing:
            LOGGER.warning("Registered tools missing from catalog: %s", ", ".join(missing))
        return cls(operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> list[str]:
        return [operation.name for operation in self._operations]

    def get(self, name: str) -> Operation:
        return self._by_name[name]

    def list(self) -> list[Operation]:
        return list(self._operations)

    def to_tools(self) -> list[types.Tool]:
        return [operation.to_tool() for operation in self._operations]


def _require_str(value: Any, field: str, source: Path) -> str:
    if not isinstance(value, str) or not value:
        raise CatalogError(f"Field '{field}' in tool catalog {source} must be a non-empty string")
    return value
