from __future__ import annotations

from typing import Any

from mcp import types
from pydantic import BaseModel, ConfigDict, Field

__all__ = ["ToolResult"]


class ToolResult(BaseModel):
    """Result envelope returned for every successful tool invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: tuple[types.TextContent, ...] = Field(..., min_length=1)

    @classmethod
    def text(cls, payload: str) -> ToolResult:
        return cls(content=(types.TextContent(type="text", text=payload),))

    @classmethod
    def from_model(cls, model: BaseModel) -> ToolResult:
        """Serialise ``model`` as compact JSON, omitting fields Slack never sent."""

        return cls.text(model.model_dump_json(exclude_unset=True))

    @property
    def first_text(self) -> str:
        return self.content[0].text

    def to_content(self) -> list[types.TextContent]:
        return list(self.content)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
