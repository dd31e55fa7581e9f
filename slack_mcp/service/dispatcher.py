from __future__ import annotations

import base64
import binascii
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from mcp import types

from slack_mcp.logging import InvocationLogEvent, JsonLogWriter
from slack_mcp.observability import log_event
from slack_mcp.validation import SchemaRegistry
from slack_mcp.validation import schemas

from .catalog import ToolCatalog
from .envelope import ToolResult
from .errors import SlackRequestError, ToolError, ToolValidationError, UnknownToolError
from .fanout import settle_all
from .gateway import SlackGateway

__all__ = ["Dispatcher", "build_search_query", "file_to_block"]

MESSAGE_POSTED = "Message posted successfully"
REPLY_SENT = "Reply sent to thread successfully"
REACTION_ADDED = "Reaction added successfully"
FILE_DELETED = "File deleted successfully"
FILE_SENT = "File sent successfully"

_Handler = Callable[[Any], Awaitable[ToolResult]]


def build_search_query(request: schemas.SearchMessagesRequest) -> str:
    """Fold the search filters into Slack's query syntax in a fixed order."""

    clauses = [request.query]
    if request.in_channel:
        clauses.append(f"in:{request.in_channel}")
    if request.in_group:
        clauses.append(f"in:{request.in_group}")
    if request.in_dm:
        clauses.append(f"in:<@{request.in_dm}>")
    if request.from_user:
        clauses.append(f"from:<@{request.from_user}>")
    if request.from_bot:
        clauses.append(f"from:{request.from_bot}")
    return " ".join(clauses)


def file_to_block(file: Mapping[str, Any]) -> dict[str, Any]:
    """Render a Slack file object as a message block."""

    mimetype = file.get("mimetype")
    if isinstance(mimetype, str) and mimetype.startswith("image/"):
        return {
            "type": "image",
            "image_url": file.get("url_private"),
            # Blank titles and names count as missing.
            "alt_text": file.get("title") or file.get("name") or "image",
        }
    return {"type": "file", "external_id": file.get("id"), "source": "remote"}


def _ensure_ok(payload: Mapping[str, Any], action: str) -> None:
    if not payload.get("ok"):
        raise SlackRequestError(action, str(payload.get("error") or "unknown_error"))


class Dispatcher:
    """Route tool calls to Slack and shape their results."""

    def __init__(
        self,
        *,
        gateway: SlackGateway,
        registry: SchemaRegistry,
        catalog: ToolCatalog,
        log_writer: JsonLogWriter | None = None,
        transport: str = "stdio",
        session_id: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._catalog = catalog
        self._log_writer = log_writer
        self._transport = transport
        self._session_id = session_id
        self._handlers: dict[str, _Handler] = {
            "slack_list_channels": self._list_channels,
            "slack_post_message": self._post_message,
            "slack_reply_to_thread": self._reply_to_thread,
            "slack_add_reaction": self._add_reaction,
            "slack_get_channel_history": self._get_channel_history,
            "slack_get_thread_replies": self._get_thread_replies,
            "slack_get_users": self._get_users,
            "slack_get_user_profile": self._get_user_profile,
            "slack_get_user_profiles": self._get_user_profiles,
            "slack_search_messages": self._search_messages,
            "slack_upload_file": self._upload_file,
            "slack_list_files": self._list_files,
            "slack_get_file_info": self._get_file_info,
            "slack_delete_file": self._delete_file,
            "slack_send_file": self._send_file,
        }

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def list_tools(self) -> list[types.Tool]:
        return self._catalog.to_tools()

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None) -> ToolResult:
        """Validate ``arguments``, run the tool and return its result envelope."""

        start = time.perf_counter()
        trace_id = str(uuid4())
        self._write_log(trace_id, name, "tool.invoke", "ok", start)
        try:
            handler = self._handlers.get(name)
            if handler is None or name not in self._catalog:
                raise UnknownToolError(name)
            request = self._registry.validate_input(name, arguments)
            result = await handler(request)
        except ToolError as exc:
            self._record_failure(trace_id, name, start, exc.to_dict())
            raise
        except Exception as exc:
            self._record_failure(
                trace_id, name, start, {"code": "INTERNAL_ERROR", "message": str(exc)}
            )
            raise
        self._write_log(trace_id, name, "tool.ok", "ok", start)
        log_event(
            event="tool.call",
            transport=self._transport,
            status="ok",
            tool=name,
            trace_id=trace_id,
            session_id=self._session_id,
            duration_ms=round(_duration_ms(start), 3),
        )
        return result

    # Conversations ---------------------------------------------------------------------

    async def _list_channels(self, request: schemas.ListChannelsRequest) -> ToolResult:
        payload = await self._gateway.list_channels(limit=request.limit, cursor=request.cursor)
        _ensure_ok(payload, "list channels")
        return self._shaped("slack_list_channels", payload)

    async def _get_channel_history(
        self, request: schemas.GetChannelHistoryRequest
    ) -> ToolResult:
        payload = await self._gateway.channel_history(
            channel=request.channel_id, limit=request.limit, cursor=request.cursor
        )
        _ensure_ok(payload, "get channel history")
        return self._shaped("slack_get_channel_history", payload)

    async def _get_thread_replies(self, request: schemas.GetThreadRepliesRequest) -> ToolResult:
        payload = await self._gateway.thread_replies(
            channel=request.channel_id,
            ts=request.thread_ts,
            limit=request.limit,
            cursor=request.cursor,
        )
        _ensure_ok(payload, "get thread replies")
        return self._shaped("slack_get_thread_replies", payload)

    # Messaging -------------------------------------------------------------------------

    async def _post_message(self, request: schemas.PostMessageRequest) -> ToolResult:
        blocks = None
        if request.file_ids:
            blocks = await self._blocks_for_files(request.file_ids)
        payload = await self._gateway.post_message(
            channel=request.channel_id, text=request.text, blocks=blocks
        )
        _ensure_ok(payload, "post message")
        return ToolResult.text(MESSAGE_POSTED)

    async def _reply_to_thread(self, request: schemas.ReplyToThreadRequest) -> ToolResult:
        payload = await self._gateway.post_message(
            channel=request.channel_id, text=request.text, thread_ts=request.thread_ts
        )
        _ensure_ok(payload, "reply to thread")
        return ToolResult.text(REPLY_SENT)

    async def _add_reaction(self, request: schemas.AddReactionRequest) -> ToolResult:
        payload = await self._gateway.add_reaction(
            channel=request.channel_id, timestamp=request.timestamp, name=request.reaction
        )
        _ensure_ok(payload, "add reaction")
        return ToolResult.text(REACTION_ADDED)

    async def _search_messages(self, request: schemas.SearchMessagesRequest) -> ToolResult:
        payload = await self._gateway.search_messages(
            query=build_search_query(request),
            highlight=request.highlight,
            sort=request.sort,
            sort_dir=request.sort_dir,
            count=request.count,
            page=request.page,
        )
        _ensure_ok(payload, "search messages")
        return self._shaped("slack_search_messages", payload)

    # Users -----------------------------------------------------------------------------

    async def _get_users(self, request: schemas.GetUsersRequest) -> ToolResult:
        payload = await self._gateway.list_users(limit=request.limit, cursor=request.cursor)
        _ensure_ok(payload, "get users")
        return self._shaped("slack_get_users", payload)

    async def _get_user_profile(self, request: schemas.GetUserProfileRequest) -> ToolResult:
        payload = await self._gateway.user_profile(user=request.user_id)
        _ensure_ok(payload, "get user profile")
        return self._shaped("slack_get_user_profile", payload)

    async def _get_user_profiles(self, request: schemas.GetUserProfilesRequest) -> ToolResult:
        async def fetch(user_id: str) -> dict[str, Any]:
            payload = await self._gateway.user_profile(user=user_id)
            if not payload.get("ok"):
                return {"user_id": user_id, "error": str(payload.get("error") or "Unknown error")}
            parsed = self._registry.validate_output("slack_get_user_profile", payload)
            row: dict[str, Any] = {"user_id": user_id}
            if parsed.profile is not None:
                row["profile"] = parsed.profile.model_dump(exclude_unset=True)
            return row

        settled = await settle_all(request.user_ids, fetch)
        rows = [
            outcome.value if outcome.ok else {"user_id": outcome.key, "error": outcome.error}
            for outcome in settled
        ]
        return self._shaped("slack_get_user_profiles", {"profiles": rows})

    # Files -----------------------------------------------------------------------------

    async def _upload_file(self, request: schemas.UploadFileRequest) -> ToolResult:
        try:
            content = base64.b64decode("".join(request.content_base64.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ToolValidationError(
                "slack_upload_file", [("content_base64", "Content must be valid base64")]
            ) from exc

        reserve = await self._gateway.reserve_upload(filename=request.filename, length=len(content))
        upload_url = reserve.get("upload_url")
        file_id = reserve.get("file_id")
        if not reserve.get("ok") or not upload_url or not file_id:
            raise SlackRequestError(
                "reserve upload", str(reserve.get("error") or "missing_upload_url")
            )

        response = await self._gateway.upload_bytes(upload_url, content)
        if not response.is_success:
            raise SlackRequestError("upload file bytes", str(response.status_code))

        title = request.title if request.title is not None else request.filename
        complete = await self._gateway.complete_upload(
            files=[{"id": file_id, "title": title}], channel_id=request.channel_id
        )
        _ensure_ok(complete, "complete upload")
        return self._shaped("slack_upload_file", {**complete, "file": {"id": file_id}})

    async def _list_files(self, request: schemas.ListFilesRequest) -> ToolResult:
        payload = await self._gateway.list_files(
            user=request.user,
            channel=request.channel,
            types=request.types,
            ts_from=request.ts_from,
            ts_to=request.ts_to,
            cursor=request.cursor,
            limit=request.limit,
        )
        _ensure_ok(payload, "list files")
        return self._shaped("slack_list_files", payload)

    async def _get_file_info(self, request: schemas.GetFileInfoRequest) -> ToolResult:
        payload = await self._gateway.file_info(file=request.file_id)
        _ensure_ok(payload, "get file info")
        return self._shaped("slack_get_file_info", payload)

    async def _delete_file(self, request: schemas.DeleteFileRequest) -> ToolResult:
        payload = await self._gateway.delete_file(file=request.file_id)
        _ensure_ok(payload, "delete file")
        return ToolResult.text(FILE_DELETED)

    async def _send_file(self, request: schemas.SendFileRequest) -> ToolResult:
        blocks = await self._blocks_for_files(request.file_ids)
        payload = await self._gateway.post_message(
            channel=request.channel_id, text=request.text or "", blocks=blocks
        )
        _ensure_ok(payload, "send file")
        return ToolResult.text(FILE_SENT)

    async def _blocks_for_files(self, file_ids: Sequence[str]) -> list[dict[str, Any]]:
        async def fetch(file_id: str) -> dict[str, Any]:
            return await self._gateway.file_info(file=file_id)

        blocks: list[dict[str, Any]] = []
        for outcome in await settle_all(file_ids, fetch):
            action = f"fetch file info for {outcome.key}"
            if not outcome.ok:
                raise SlackRequestError(action, str(outcome.error))
            payload = outcome.value or {}
            file = payload.get("file")
            if not payload.get("ok") or not isinstance(file, Mapping):
                raise SlackRequestError(action, str(payload.get("error") or "file_not_found"))
            blocks.append(file_to_block(file))
        return blocks

    # Internal helpers ------------------------------------------------------------------

    def _shaped(self, tool_name: str, payload: Mapping[str, Any]) -> ToolResult:
        return ToolResult.from_model(self._registry.validate_output(tool_name, payload))

    def _record_failure(
        self, trace_id: str, name: str, start: float, error: dict[str, Any]
    ) -> None:
        self._write_log(trace_id, name, "tool.err", "err", start, error=error)
        log_event(
            event="tool.call",
            transport=self._transport,
            status="error",
            tool=name,
            trace_id=trace_id,
            session_id=self._session_id,
            duration_ms=round(_duration_ms(start), 3),
            error=error,
        )

    def _write_log(
        self,
        trace_id: str,
        name: str,
        event: str,
        status: str,
        start: float,
        *,
        error: Mapping[str, Any] | None = None,
    ) -> None:
        if self._log_writer is None:
            return
        metadata: dict[str, Any] = {}
        if name in self._registry:
            metadata["schemaDigest"] = self._registry.fingerprint(name)
        self._log_writer.write(
            InvocationLogEvent(
                ts=datetime.now(UTC),
                trace_id=trace_id,
                tool=name,
                event=event,
                status=status,
                duration_ms=_duration_ms(start) if event != "tool.invoke" else 0.0,
                transport=self._transport,
                session_id=self._session_id,
                metadata=metadata,
                error=error,
            )
        )


def _duration_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0
