from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jsonschema import validators
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from slack_mcp.service.errors import ToolOutputError, ToolValidationError, UnknownToolError
from slack_mcp.validation import schemas

__all__ = ["DEFAULT_TOOL_SCHEMAS", "SchemaRegistry", "ToolSchemas"]


@dataclass(frozen=True, slots=True)
class ToolSchemas:
    """Request and (optional) response model bound to a single tool."""

    request: type[BaseModel]
    response: type[BaseModel] | None = None


DEFAULT_TOOL_SCHEMAS: dict[str, ToolSchemas] = {
    "slack_list_channels": ToolSchemas(schemas.ListChannelsRequest, schemas.ListChannelsResponse),
    "slack_post_message": ToolSchemas(schemas.PostMessageRequest),
    "slack_reply_to_thread": ToolSchemas(schemas.ReplyToThreadRequest),
    "slack_add_reaction": ToolSchemas(schemas.AddReactionRequest),
    "slack_get_channel_history": ToolSchemas(
        schemas.GetChannelHistoryRequest, schemas.ChannelHistoryResponse
    ),
    "slack_get_thread_replies": ToolSchemas(
        schemas.GetThreadRepliesRequest, schemas.ThreadRepliesResponse
    ),
    "slack_get_users": ToolSchemas(schemas.GetUsersRequest, schemas.UsersResponse),
    "slack_get_user_profile": ToolSchemas(
        schemas.GetUserProfileRequest, schemas.UserProfileResponse
    ),
    "slack_get_user_profiles": ToolSchemas(
        schemas.GetUserProfilesRequest, schemas.UserProfilesResponse
    ),
    "slack_search_messages": ToolSchemas(
        schemas.SearchMessagesRequest, schemas.SearchMessagesResponse
    ),
    "slack_upload_file": ToolSchemas(schemas.UploadFileRequest, schemas.UploadFileResponse),
    "slack_list_files": ToolSchemas(schemas.ListFilesRequest, schemas.ListFilesResponse),
    "slack_get_file_info": ToolSchemas(schemas.GetFileInfoRequest, schemas.FileInfoResponse),
    "slack_delete_file": ToolSchemas(schemas.DeleteFileRequest),
    "slack_send_file": ToolSchemas(schemas.SendFileRequest),
}


def _violations(exc: PydanticValidationError) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        found.append((location, str(error.get("msg", "invalid value"))))
    return found


class SchemaRegistry:
    """Validate tool arguments and Slack payloads against per-tool models."""

    def __init__(self, tool_schemas: Mapping[str, ToolSchemas] | None = None) -> None:
        self._tools: dict[str, ToolSchemas] = dict(tool_schemas or DEFAULT_TOOL_SCHEMAS)
        self._input_schema_cache: dict[str, dict[str, Any]] = {}
        self._fingerprints: dict[str, str] = {}

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def tool_names(self) -> list[str]:
        return list(self._tools)

    def schemas_for(self, tool_name: str) -> ToolSchemas:
        try:
            return self._tools[tool_name]
        except KeyError:
            raise UnknownToolError(tool_name) from None

    def validate_input(self, tool_name: str, arguments: Mapping[str, Any] | None) -> BaseModel:
        """Return the fully defaulted request model for ``arguments``."""

        bundle = self.schemas_for(tool_name)
        if arguments is None:
            raise ToolValidationError(tool_name, [("arguments", "Arguments are required")])
        if not isinstance(arguments, Mapping):
            raise ToolValidationError(tool_name, [("arguments", "Arguments must be an object")])
        try:
            return bundle.request.model_validate(dict(arguments))
        except PydanticValidationError as exc:
            raise ToolValidationError(tool_name, _violations(exc)) from exc

    def validate_output(self, tool_name: str, payload: Mapping[str, Any]) -> BaseModel:
        """Reshape a Slack payload, dropping every undeclared field."""

        bundle = self.schemas_for(tool_name)
        if bundle.response is None:
            raise KeyError(f"Tool '{tool_name}' does not declare a response shape")
        try:
            return bundle.response.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ToolOutputError(tool_name, _violations(exc)) from exc

    def input_schema(self, tool_name: str) -> dict[str, Any]:
        """Return the JSON schema published for the tool's arguments."""

        if tool_name in self._input_schema_cache:
            return self._input_schema_cache[tool_name]
        schema = self.schemas_for(tool_name).request.model_json_schema()
        validator_cls = validators.validator_for(schema)
        validator_cls.check_schema(schema)
        self._input_schema_cache[tool_name] = schema
        self._fingerprints[tool_name] = self._fingerprint(schema)
        return schema

    def fingerprint(self, tool_name: str) -> str:
        """Return a stable digest of the tool's published input schema."""

        if tool_name not in self._fingerprints:
            self.input_schema(tool_name)
        return self._fingerprints[tool_name]

    def _fingerprint(self, schema: Mapping[str, Any]) -> str:
        payload = json.dumps(schema, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
