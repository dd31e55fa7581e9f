"""Thin async wrapper around the Slack Web API clients used by the tools."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

__all__ = ["SlackGateway"]

LOGGER = logging.getLogger(__name__)


def _payload(response: Any) -> dict[str, Any]:
    data = getattr(response, "data", response)
    if isinstance(data, dict):
        return dict(data)
    if data is None:
        return {"ok": False, "error": "empty_response"}
    return {"ok": False, "error": f"unexpected_response:{type(data).__name__}"}


class SlackGateway:
    """Issue Slack Web API calls and return their raw JSON payloads.

    Slack ``ok: false`` replies are returned as payloads rather than raised,
    whether the client reported them inline or through :class:`SlackApiError`.
    Deciding what counts as a failure is left to the dispatcher. Network
    level errors propagate unchanged.

    ``bot`` is used for everything that acts as the app; ``user`` is used
    where Slack requires a user token (search, file listing and lookups).
    """

    def __init__(
        self,
        *,
        bot: AsyncWebClient,
        user: AsyncWebClient,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._bot = bot
        self._user = user
        self._http = http

    @classmethod
    def from_tokens(cls, *, bot_token: str, user_token: str) -> SlackGateway:
        return cls(bot=AsyncWebClient(token=bot_token), user=AsyncWebClient(token=user_token))

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # Conversations ---------------------------------------------------------------------

    async def list_channels(self, *, limit: int, cursor: str | None) -> dict[str, Any]:
        return await self._call(
            self._bot.conversations_list,
            limit=limit,
            cursor=cursor,
            types="public_channel",
        )

    async def channel_history(
        self, *, channel: str, limit: int, cursor: str | None
    ) -> dict[str, Any]:
        return await self._call(
            self._bot.conversations_history, channel=channel, limit=limit, cursor=cursor
        )

    async def thread_replies(
        self, *, channel: str, ts: str, limit: int, cursor: str | None
    ) -> dict[str, Any]:
        return await self._call(
            self._bot.conversations_replies, channel=channel, ts=ts, limit=limit, cursor=cursor
        )

    # Messaging -------------------------------------------------------------------------

    async def post_message(
        self,
        *,
        channel: str,
        text: str,
        thread_ts: str | None = None,
        blocks: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return await self._call(
            self._bot.chat_postMessage,
            channel=channel,
            text=text,
            thread_ts=thread_ts,
            blocks=blocks,
        )

    async def add_reaction(self, *, channel: str, timestamp: str, name: str) -> dict[str, Any]:
        return await self._call(
            self._bot.reactions_add, channel=channel, timestamp=timestamp, name=name
        )

    async def search_messages(
        self,
        *,
        query: str,
        highlight: bool,
        sort: str,
        sort_dir: str,
        count: int,
        page: int,
    ) -> dict[str, Any]:
        return await self._call(
            self._user.search_messages,
            query=query,
            highlight=highlight,
            sort=sort,
            sort_dir=sort_dir,
            count=count,
            page=page,
        )

    # Users -----------------------------------------------------------------------------

    async def list_users(self, *, limit: int, cursor: str | None) -> dict[str, Any]:
        return await self._call(self._bot.users_list, limit=limit, cursor=cursor)

    async def user_profile(self, *, user: str) -> dict[str, Any]:
        return await self._call(self._bot.users_profile_get, user=user)

    # Files -----------------------------------------------------------------------------

    async def file_info(self, *, file: str) -> dict[str, Any]:
        return await self._call(self._user.files_info, file=file)

    async def list_files(self, **filters: Any) -> dict[str, Any]:
        return await self._call(self._user.files_list, **filters)

    async def delete_file(self, *, file: str) -> dict[str, Any]:
        return await self._call(self._bot.files_delete, file=file)

    async def reserve_upload(self, *, filename: str, length: int) -> dict[str, Any]:
        return await self._call(
            self._bot.files_getUploadURLExternal, filename=filename, length=length
        )

    async def complete_upload(
        self, *, files: list[dict[str, Any]], channel_id: str | None
    ) -> dict[str, Any]:
        return await self._call(
            self._bot.files_completeUploadExternal, files=files, channel_id=channel_id
        )

    async def upload_bytes(self, url: str, content: bytes) -> httpx.Response:
        """Send raw file bytes to a reserved upload URL."""

        if self._http is None:
            self._http = httpx.AsyncClient()
        return await self._http.put(
            url,
            content=content,
            headers={"Content-Type": "application/octet-stream"},
        )

    # Internal helpers ------------------------------------------------------------------

    async def _call(
        self, method: Callable[..., Awaitable[Any]], **params: Any
    ) -> dict[str, Any]:
        kwargs = {key: value for key, value in params.items() if value is not None}
        try:
            response = await method(**kwargs)
        except SlackApiError as exc:
            LOGGER.debug("Slack call %s returned ok=false", getattr(method, "__name__", method))
            return _payload(exc.response)
        return _payload(response)
