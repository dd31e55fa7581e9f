"""Request and response models for the Slack tools.

Request models are strict: wrong primitive types, out-of-range numbers and
malformed timestamps are rejected rather than coerced. Unknown request keys
are ignored. Response models are lax and drop every field they do not
declare, so Slack can grow its payloads without breaking the tools.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "TIMESTAMP_PATTERN",
    "AddReactionRequest",
    "ChannelHistoryResponse",
    "DeleteFileRequest",
    "FileInfoResponse",
    "GetChannelHistoryRequest",
    "GetFileInfoRequest",
    "GetThreadRepliesRequest",
    "GetUserProfileRequest",
    "GetUserProfilesRequest",
    "GetUsersRequest",
    "ListChannelsRequest",
    "ListChannelsResponse",
    "ListFilesRequest",
    "ListFilesResponse",
    "PostMessageRequest",
    "ReplyToThreadRequest",
    "SearchMessagesRequest",
    "SearchMessagesResponse",
    "SendFileRequest",
    "ThreadRepliesResponse",
    "UploadFileRequest",
    "UploadFileResponse",
    "UserProfile",
    "UserProfileResponse",
    "UserProfileResult",
    "UserProfilesResponse",
    "UsersResponse",
]

TIMESTAMP_PATTERN = r"^[0-9]{10}\.[0-9]{6}$"

LISTING_LIMIT_MAX = 1000
BATCH_SIZE_MAX = 100
SEARCH_PAGE_MAX = 100


class _Request(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore")


ChannelId = Annotated[str, Field(description="The ID of the channel")]
Cursor = Annotated[
    str | None,
    Field(description="Pagination cursor for next page of results"),
]
ThreadTimestamp = Annotated[
    str,
    Field(
        pattern=TIMESTAMP_PATTERN,
        description=(
            "The timestamp of the parent message in the format '1234567890.123456'. "
            "Timestamps in the format without the period can be converted by adding "
            "the period such that 6 numbers come after it."
        ),
    ),
]


def _listing_limit(noun: str) -> Any:
    return Field(
        default=100,
        ge=1,
        le=LISTING_LIMIT_MAX,
        description=f"Maximum number of {noun} to return (default 100)",
    )


# Requests ---------------------------------------------------------------------------


class ListChannelsRequest(_Request):
    limit: int = _listing_limit("channels")
    cursor: Cursor = None


class PostMessageRequest(_Request):
    channel_id: str = Field(description="The ID of the channel to post to")
    text: str = Field(description="The message text to post")
    file_ids: list[str] | None = Field(
        default=None,
        description="IDs of previously uploaded files to attach as blocks",
    )


class ReplyToThreadRequest(_Request):
    channel_id: str = Field(description="The ID of the channel containing the thread")
    thread_ts: ThreadTimestamp
    text: str = Field(description="The reply text")


class AddReactionRequest(_Request):
    channel_id: str = Field(description="The ID of the channel containing the message")
    timestamp: str = Field(
        pattern=TIMESTAMP_PATTERN,
        description="The timestamp of the message to react to in the format '1234567890.123456'",
    )
    reaction: str = Field(description="The name of the emoji reaction (without ::)")


class GetChannelHistoryRequest(_Request):
    channel_id: ChannelId
    limit: int = _listing_limit("messages")
    cursor: Cursor = None


class GetThreadRepliesRequest(_Request):
    channel_id: str = Field(description="The ID of the channel containing the thread")
    thread_ts: ThreadTimestamp
    limit: int = _listing_limit("replies")
    cursor: Cursor = None


class GetUsersRequest(_Request):
    cursor: Cursor = None
    limit: int = _listing_limit("users")


class GetUserProfileRequest(_Request):
    user_id: str = Field(description="The ID of the user")


class GetUserProfilesRequest(_Request):
    user_ids: list[str] = Field(
        min_length=1,
        max_length=BATCH_SIZE_MAX,
        description="Array of user IDs to retrieve profiles for (max 100)",
    )


class SearchMessagesRequest(_Request):
    query: str = Field(
        description=(
            "Basic search query text only. Filters such as channel or user are "
            "given through the dedicated fields, not inside the query."
        )
    )
    in_channel: str | None = Field(
        default=None,
        description="Search within a specific channel. Specify the channel name, not the ID.",
    )
    in_group: str | None = Field(
        default=None,
        description="Search within a specific private group. Specify the group name.",
    )
    in_dm: str | None = Field(
        default=None,
        description="Search within a direct message conversation. Specify the user ID.",
    )
    from_user: str | None = Field(
        default=None,
        description="Search for messages from a specific user. Specify the user ID.",
    )
    from_bot: str | None = Field(
        default=None,
        description="Search for messages from a specific bot. Specify the bot name.",
    )
    highlight: bool = Field(default=False, description="Enable highlighting of search results")
    sort: Literal["score", "timestamp"] = Field(
        default="score",
        description="Search result sort method (score or timestamp)",
    )
    sort_dir: Literal["asc", "desc"] = Field(
        default="desc",
        description="Sort direction (asc or desc)",
    )
    count: int = Field(
        default=20,
        ge=1,
        le=SEARCH_PAGE_MAX,
        description="Number of messages per page (default 20)",
    )
    page: int = Field(
        default=1,
        ge=1,
        le=SEARCH_PAGE_MAX,
        description="Page number of results to return (default 1)",
    )


class UploadFileRequest(_Request):
    filename: str = Field(description="Name of the file including extension")
    content_base64: str = Field(description="File content encoded as base64")
    title: str | None = Field(default=None, description="Title of the file (defaults to filename)")
    channel_id: str | None = Field(
        default=None,
        description="Channel or DM ID to share the file to once uploaded",
    )


class ListFilesRequest(_Request):
    user: str | None = Field(default=None, description="Filter files created by this user ID")
    channel: str | None = Field(default=None, description="Filter files shared in this channel ID")
    types: str | None = Field(
        default=None,
        description="Comma separated file types to include (e.g. 'images,pdfs')",
    )
    ts_from: str | None = Field(default=None, description="Only files created after this Unix timestamp")
    ts_to: str | None = Field(default=None, description="Only files created before this Unix timestamp")
    cursor: Cursor = None
    limit: int = _listing_limit("files")


class GetFileInfoRequest(_Request):
    file_id: str = Field(description="The ID of the file")


class DeleteFileRequest(_Request):
    file_id: str = Field(description="The ID of the file to delete")


class SendFileRequest(_Request):
    channel_id: str = Field(description="The ID of the channel to post to")
    file_ids: list[str] = Field(min_length=1, description="IDs of existing files to send")
    text: str | None = Field(default=None, description="Optional message text")


# Responses --------------------------------------------------------------------------


class ResponseMetadata(_Response):
    next_cursor: str | None = None


class _Listing(_Response):
    ok: bool | None = None
    response_metadata: ResponseMetadata | None = None


class TextValue(_Response):
    value: str | None = None


class Channel(_Response):
    id: str | None = None
    name: str | None = None
    is_archived: bool | None = None
    is_private: bool | None = None
    created: int | None = None
    creator: str | None = None
    num_members: int | None = None
    topic: TextValue | None = None
    purpose: TextValue | None = None


class ListChannelsResponse(_Listing):
    channels: list[Channel] | None = None


class Reaction(_Response):
    name: str | None = None
    count: int | None = None
    users: list[str] | None = None


class Message(_Response):
    type: str | None = None
    subtype: str | None = None
    user: str | None = None
    bot_id: str | None = None
    text: str | None = None
    ts: str | None = None
    thread_ts: str | None = None
    reply_count: int | None = None
    reply_users_count: int | None = None
    latest_reply: str | None = None
    reactions: list[Reaction] | None = None


class ChannelHistoryResponse(_Listing):
    messages: list[Message] | None = None
    has_more: bool | None = None


class ThreadRepliesResponse(_Listing):
    messages: list[Message] | None = None
    has_more: bool | None = None


class MemberProfile(_Response):
    display_name: str | None = None
    real_name: str | None = None
    email: str | None = None
    title: str | None = None


class Member(_Response):
    id: str | None = None
    name: str | None = None
    real_name: str | None = None
    deleted: bool | None = None
    is_bot: bool | None = None
    tz: str | None = None
    profile: MemberProfile | None = None


class UsersResponse(_Listing):
    members: list[Member] | None = None


class UserProfile(_Response):
    display_name: str | None = None
    display_name_normalized: str | None = None
    real_name: str | None = None
    real_name_normalized: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    status_text: str | None = None
    status_emoji: str | None = None
    image_72: str | None = None


class UserProfileResponse(_Response):
    profile: UserProfile | None = None


class UserProfileResult(_Response):
    user_id: str
    profile: UserProfile | None = None
    error: str | None = None


class UserProfilesResponse(_Response):
    profiles: list[UserProfileResult]


class SearchChannel(_Response):
    id: str | None = None
    name: str | None = None


class SearchMatch(_Response):
    channel: SearchChannel | None = None
    user: str | None = None
    username: str | None = None
    text: str | None = None
    ts: str | None = None
    permalink: str | None = None


class SearchPagination(_Response):
    total_count: int | None = None
    page: int | None = None
    per_page: int | None = None
    page_count: int | None = None
    first: int | None = None
    last: int | None = None


class SearchMessages(_Response):
    total: int | None = None
    matches: list[SearchMatch] | None = None
    pagination: SearchPagination | None = None


class SearchMessagesResponse(_Response):
    ok: bool | None = None
    query: str | None = None
    messages: SearchMessages | None = None


class SlackFile(_Response):
    id: str | None = None
    name: str | None = None
    title: str | None = None
    mimetype: str | None = None
    filetype: str | None = None
    size: int | None = None
    user: str | None = None
    created: int | None = None
    url_private: str | None = None
    permalink: str | None = None
    channels: list[str] | None = None


class FilePaging(_Response):
    count: int | None = None
    total: int | None = None
    page: int | None = None
    pages: int | None = None


class ListFilesResponse(_Listing):
    files: list[SlackFile] | None = None
    paging: FilePaging | None = None


class FileInfoResponse(_Response):
    ok: bool | None = None
    file: SlackFile | None = None


class UploadedFile(_Response):
    id: str
    title: str | None = None


class UploadFileResponse(_Response):
    ok: bool | None = None
    file: UploadedFile
    files: list[UploadedFile] | None = None
