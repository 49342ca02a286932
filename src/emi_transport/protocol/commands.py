"""Command definitions for the request/response channel.

Commands are POSTed as JSON to ``{rest_gateway}/{endpoint}``. The gateway
wraps every result in the same envelope:

    {
        "status": "ok",
        "retcode": 0,
        "data": {"uin": 10001, "nickname": "bot"}
    }

The command client unwraps ``data`` before handing it to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Endpoint(str, Enum):
    """Every operation exposed by the gateway's command API."""

    # System
    GET_LOGIN_INFO = "get_login_info"
    GET_IMPL_INFO = "get_impl_info"
    GET_USER_PROFILE = "get_user_profile"
    GET_FRIEND_LIST = "get_friend_list"
    GET_FRIEND_INFO = "get_friend_info"
    GET_GROUP_LIST = "get_group_list"
    GET_GROUP_INFO = "get_group_info"
    GET_GROUP_MEMBER_LIST = "get_group_member_list"
    GET_GROUP_MEMBER_INFO = "get_group_member_info"
    SET_AVATAR = "set_avatar"
    SET_NICKNAME = "set_nickname"
    SET_BIO = "set_bio"
    GET_CUSTOM_FACE_URL_LIST = "get_custom_face_url_list"
    GET_COOKIES = "get_cookies"
    GET_CSRF_TOKEN = "get_csrf_token"

    # Message
    SEND_PRIVATE_MESSAGE = "send_private_message"
    SEND_GROUP_MESSAGE = "send_group_message"
    RECALL_PRIVATE_MESSAGE = "recall_private_message"
    RECALL_GROUP_MESSAGE = "recall_group_message"
    GET_MESSAGE = "get_message"
    GET_HISTORY_MESSAGES = "get_history_messages"
    GET_RESOURCE_TEMP_URL = "get_resource_temp_url"
    GET_FORWARDED_MESSAGES = "get_forwarded_messages"
    MARK_MESSAGE_AS_READ = "mark_message_as_read"

    # Friend
    SEND_FRIEND_NUDGE = "send_friend_nudge"
    SEND_PROFILE_LIKE = "send_profile_like"
    DELETE_FRIEND = "delete_friend"
    GET_FRIEND_REQUESTS = "get_friend_requests"
    ACCEPT_FRIEND_REQUEST = "accept_friend_request"
    REJECT_FRIEND_REQUEST = "reject_friend_request"

    # Group
    SET_GROUP_NAME = "set_group_name"
    SET_GROUP_AVATAR = "set_group_avatar"
    SET_GROUP_MEMBER_CARD = "set_group_member_card"
    SET_GROUP_MEMBER_SPECIAL_TITLE = "set_group_member_special_title"
    SET_GROUP_MEMBER_ADMIN = "set_group_member_admin"
    SET_GROUP_MEMBER_MUTE = "set_group_member_mute"
    SET_GROUP_WHOLE_MUTE = "set_group_whole_mute"
    KICK_GROUP_MEMBER = "kick_group_member"
    GET_GROUP_ANNOUNCEMENTS = "get_group_announcements"
    SEND_GROUP_ANNOUNCEMENT = "send_group_announcement"
    DELETE_GROUP_ANNOUNCEMENT = "delete_group_announcement"
    GET_GROUP_ESSENCE_MESSAGES = "get_group_essence_messages"
    SET_GROUP_ESSENCE_MESSAGE = "set_group_essence_message"
    QUIT_GROUP = "quit_group"
    SEND_GROUP_MESSAGE_REACTION = "send_group_message_reaction"
    SEND_GROUP_NUDGE = "send_group_nudge"
    GET_GROUP_NOTIFICATIONS = "get_group_notifications"
    ACCEPT_GROUP_REQUEST = "accept_group_request"
    REJECT_GROUP_REQUEST = "reject_group_request"
    ACCEPT_GROUP_INVITATION = "accept_group_invitation"
    REJECT_GROUP_INVITATION = "reject_group_invitation"

    # File
    UPLOAD_PRIVATE_FILE = "upload_private_file"
    UPLOAD_GROUP_FILE = "upload_group_file"
    GET_PRIVATE_FILE_DOWNLOAD_URL = "get_private_file_download_url"
    GET_GROUP_FILE_DOWNLOAD_URL = "get_group_file_download_url"
    GET_GROUP_FILES = "get_group_files"
    MOVE_GROUP_FILE = "move_group_file"
    RENAME_GROUP_FILE = "rename_group_file"
    DELETE_GROUP_FILE = "delete_group_file"
    CREATE_GROUP_FOLDER = "create_group_folder"
    RENAME_GROUP_FOLDER = "rename_group_folder"
    DELETE_GROUP_FOLDER = "delete_group_folder"


class HttpResult(BaseModel):
    """Response envelope returned by every command endpoint.

    Only the HTTP status decides whether a call succeeded; ``status`` and
    ``retcode`` are passed through untouched.
    """

    status: str = ""
    code: int = Field(default=0, alias="retcode")
    data: Any = None

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Typed responses for the stable system endpoints
# =============================================================================


class LoginInfo(BaseModel):
    """Response of ``get_login_info``."""

    model_config = ConfigDict(extra="allow")

    uin: int = 0
    nickname: str = ""


class ImplInfo(BaseModel):
    """Response of ``get_impl_info``."""

    model_config = ConfigDict(extra="allow")

    impl_name: str = ""
    impl_version: str = ""
    qq_protocol_version: str = ""
    qq_protocol_type: str = ""
    milky_version: str = ""


def dump_request(request: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """Serialize a command request to a JSON-ready dict."""
    if isinstance(request, BaseModel):
        return request.model_dump(mode="json", by_alias=True, exclude_none=True)
    return dict(request)
