"""Gateway operations grouped by area.

Every operation is a thin pass-through: serialize the request, POST it to
the operation's endpoint through HttpClient, return the unwrapped result.
Requests may be plain dicts or pydantic models.

Usage:
    api = GatewayAPI(http_client)
    info = await api.system.get_login_info()
    await api.message.send_group_message({"group_id": 1, "message": [...]})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .protocol.commands import Endpoint, ImplInfo, LoginInfo
from .transport.http import HttpClient, Request


@dataclass
class _API:
    _client: HttpClient

    async def _call(self, endpoint: Endpoint, request: Request = None) -> Any:
        return await self._client.post(endpoint, request)


@dataclass
class SystemAPI(_API):
    """Account, contact and session information."""

    async def get_login_info(self, request: Request = None) -> LoginInfo:
        """Get the logged-in account."""
        result = await self._client.post(
            Endpoint.GET_LOGIN_INFO, request, response_model=LoginInfo
        )
        return result or LoginInfo()

    async def get_impl_info(self, request: Request = None) -> ImplInfo:
        """Get protocol implementation details."""
        result = await self._client.post(Endpoint.GET_IMPL_INFO, request, response_model=ImplInfo)
        return result or ImplInfo()

    async def get_user_profile(self, request: Request = None) -> Any:
        """Get a user's public profile."""
        return await self._call(Endpoint.GET_USER_PROFILE, request)

    async def get_friend_list(self, request: Request = None) -> Any:
        """List friends."""
        return await self._call(Endpoint.GET_FRIEND_LIST, request)

    async def get_friend_info(self, request: Request = None) -> Any:
        """Get one friend."""
        return await self._call(Endpoint.GET_FRIEND_INFO, request)

    async def get_group_list(self, request: Request = None) -> Any:
        """List joined groups."""
        return await self._call(Endpoint.GET_GROUP_LIST, request)

    async def get_group_info(self, request: Request = None) -> Any:
        """Get one group."""
        return await self._call(Endpoint.GET_GROUP_INFO, request)

    async def get_group_member_list(self, request: Request = None) -> Any:
        """List members of a group."""
        return await self._call(Endpoint.GET_GROUP_MEMBER_LIST, request)

    async def get_group_member_info(self, request: Request = None) -> Any:
        """Get one group member."""
        return await self._call(Endpoint.GET_GROUP_MEMBER_INFO, request)

    async def set_avatar(self, request: Request = None) -> Any:
        """Set the account avatar."""
        return await self._call(Endpoint.SET_AVATAR, request)

    async def set_nickname(self, request: Request = None) -> Any:
        """Set the account nickname."""
        return await self._call(Endpoint.SET_NICKNAME, request)

    async def set_bio(self, request: Request = None) -> Any:
        """Set the account bio."""
        return await self._call(Endpoint.SET_BIO, request)

    async def get_custom_face_url_list(self, request: Request = None) -> Any:
        """List custom sticker URLs."""
        return await self._call(Endpoint.GET_CUSTOM_FACE_URL_LIST, request)

    async def get_cookies(self, request: Request = None) -> Any:
        """Get cookies for a domain."""
        return await self._call(Endpoint.GET_COOKIES, request)

    async def get_csrf_token(self, request: Request = None) -> Any:
        """Get the CSRF token."""
        return await self._call(Endpoint.GET_CSRF_TOKEN, request)


@dataclass
class MessageAPI(_API):
    """Sending, recalling and fetching messages."""

    async def send_private_message(self, request: Request = None) -> Any:
        """Send a private message."""
        return await self._call(Endpoint.SEND_PRIVATE_MESSAGE, request)

    async def send_group_message(self, request: Request = None) -> Any:
        """Send a group message."""
        return await self._call(Endpoint.SEND_GROUP_MESSAGE, request)

    async def recall_private_message(self, request: Request = None) -> Any:
        """Recall a private message."""
        return await self._call(Endpoint.RECALL_PRIVATE_MESSAGE, request)

    async def recall_group_message(self, request: Request = None) -> Any:
        """Recall a group message."""
        return await self._call(Endpoint.RECALL_GROUP_MESSAGE, request)

    async def get_message(self, request: Request = None) -> Any:
        """Get one message."""
        return await self._call(Endpoint.GET_MESSAGE, request)

    async def get_history_messages(self, request: Request = None) -> Any:
        """Get message history."""
        return await self._call(Endpoint.GET_HISTORY_MESSAGES, request)

    async def get_resource_temp_url(self, request: Request = None) -> Any:
        """Get a temporary URL for a resource."""
        return await self._call(Endpoint.GET_RESOURCE_TEMP_URL, request)

    async def get_forwarded_messages(self, request: Request = None) -> Any:
        """Get the content of a forwarded message bundle."""
        return await self._call(Endpoint.GET_FORWARDED_MESSAGES, request)

    async def mark_message_as_read(self, request: Request = None) -> Any:
        """Mark a message as read."""
        return await self._call(Endpoint.MARK_MESSAGE_AS_READ, request)


@dataclass
class FriendAPI(_API):
    """Friend interactions and requests."""

    async def send_friend_nudge(self, request: Request = None) -> Any:
        """Nudge a friend."""
        return await self._call(Endpoint.SEND_FRIEND_NUDGE, request)

    async def send_profile_like(self, request: Request = None) -> Any:
        """Like a user's profile."""
        return await self._call(Endpoint.SEND_PROFILE_LIKE, request)

    async def delete_friend(self, request: Request = None) -> Any:
        """Remove a friend."""
        return await self._call(Endpoint.DELETE_FRIEND, request)

    async def get_friend_requests(self, request: Request = None) -> Any:
        """List friend requests."""
        return await self._call(Endpoint.GET_FRIEND_REQUESTS, request)

    async def accept_friend_request(self, request: Request = None) -> Any:
        """Accept a friend request."""
        return await self._call(Endpoint.ACCEPT_FRIEND_REQUEST, request)

    async def reject_friend_request(self, request: Request = None) -> Any:
        """Reject a friend request."""
        return await self._call(Endpoint.REJECT_FRIEND_REQUEST, request)


@dataclass
class GroupAPI(_API):
    """Group administration, notices and requests."""

    async def set_group_name(self, request: Request = None) -> Any:
        """Rename a group."""
        return await self._call(Endpoint.SET_GROUP_NAME, request)

    async def set_group_avatar(self, request: Request = None) -> Any:
        """Set a group avatar."""
        return await self._call(Endpoint.SET_GROUP_AVATAR, request)

    async def set_group_member_card(self, request: Request = None) -> Any:
        """Set a member's group card."""
        return await self._call(Endpoint.SET_GROUP_MEMBER_CARD, request)

    async def set_group_member_special_title(self, request: Request = None) -> Any:
        """Set a member's special title."""
        return await self._call(Endpoint.SET_GROUP_MEMBER_SPECIAL_TITLE, request)

    async def set_group_member_admin(self, request: Request = None) -> Any:
        """Grant or revoke group admin."""
        return await self._call(Endpoint.SET_GROUP_MEMBER_ADMIN, request)

    async def set_group_member_mute(self, request: Request = None) -> Any:
        """Mute or unmute a member."""
        return await self._call(Endpoint.SET_GROUP_MEMBER_MUTE, request)

    async def set_group_whole_mute(self, request: Request = None) -> Any:
        """Mute or unmute the whole group."""
        return await self._call(Endpoint.SET_GROUP_WHOLE_MUTE, request)

    async def kick_group_member(self, request: Request = None) -> Any:
        """Kick a member."""
        return await self._call(Endpoint.KICK_GROUP_MEMBER, request)

    async def get_group_announcements(self, request: Request = None) -> Any:
        """List group announcements."""
        return await self._call(Endpoint.GET_GROUP_ANNOUNCEMENTS, request)

    async def send_group_announcement(self, request: Request = None) -> Any:
        """Post a group announcement."""
        return await self._call(Endpoint.SEND_GROUP_ANNOUNCEMENT, request)

    async def delete_group_announcement(self, request: Request = None) -> Any:
        """Delete a group announcement."""
        return await self._call(Endpoint.DELETE_GROUP_ANNOUNCEMENT, request)

    async def get_group_essence_messages(self, request: Request = None) -> Any:
        """List essence messages."""
        return await self._call(Endpoint.GET_GROUP_ESSENCE_MESSAGES, request)

    async def set_group_essence_message(self, request: Request = None) -> Any:
        """Add or remove an essence message."""
        return await self._call(Endpoint.SET_GROUP_ESSENCE_MESSAGE, request)

    async def quit_group(self, request: Request = None) -> Any:
        """Leave a group."""
        return await self._call(Endpoint.QUIT_GROUP, request)

    async def send_group_message_reaction(self, request: Request = None) -> Any:
        """React to a group message."""
        return await self._call(Endpoint.SEND_GROUP_MESSAGE_REACTION, request)

    async def send_group_nudge(self, request: Request = None) -> Any:
        """Nudge a group member."""
        return await self._call(Endpoint.SEND_GROUP_NUDGE, request)

    async def get_group_notifications(self, request: Request = None) -> Any:
        """List group notifications."""
        return await self._call(Endpoint.GET_GROUP_NOTIFICATIONS, request)

    async def accept_group_request(self, request: Request = None) -> Any:
        """Accept a join or invite request."""
        return await self._call(Endpoint.ACCEPT_GROUP_REQUEST, request)

    async def reject_group_request(self, request: Request = None) -> Any:
        """Reject a join or invite request."""
        return await self._call(Endpoint.REJECT_GROUP_REQUEST, request)

    async def accept_group_invitation(self, request: Request = None) -> Any:
        """Accept an invitation to join a group."""
        return await self._call(Endpoint.ACCEPT_GROUP_INVITATION, request)

    async def reject_group_invitation(self, request: Request = None) -> Any:
        """Reject an invitation to join a group."""
        return await self._call(Endpoint.REJECT_GROUP_INVITATION, request)


@dataclass
class FileAPI(_API):
    """Private and group files."""

    async def upload_private_file(self, request: Request = None) -> Any:
        """Upload a file to a private chat."""
        return await self._call(Endpoint.UPLOAD_PRIVATE_FILE, request)

    async def upload_group_file(self, request: Request = None) -> Any:
        """Upload a file to a group."""
        return await self._call(Endpoint.UPLOAD_GROUP_FILE, request)

    async def get_private_file_download_url(self, request: Request = None) -> Any:
        """Get a download URL for a private file."""
        return await self._call(Endpoint.GET_PRIVATE_FILE_DOWNLOAD_URL, request)

    async def get_group_file_download_url(self, request: Request = None) -> Any:
        """Get a download URL for a group file."""
        return await self._call(Endpoint.GET_GROUP_FILE_DOWNLOAD_URL, request)

    async def get_group_files(self, request: Request = None) -> Any:
        """List files in a group folder."""
        return await self._call(Endpoint.GET_GROUP_FILES, request)

    async def move_group_file(self, request: Request = None) -> Any:
        """Move a group file."""
        return await self._call(Endpoint.MOVE_GROUP_FILE, request)

    async def rename_group_file(self, request: Request = None) -> Any:
        """Rename a group file."""
        return await self._call(Endpoint.RENAME_GROUP_FILE, request)

    async def delete_group_file(self, request: Request = None) -> Any:
        """Delete a group file."""
        return await self._call(Endpoint.DELETE_GROUP_FILE, request)

    async def create_group_folder(self, request: Request = None) -> Any:
        """Create a group folder."""
        return await self._call(Endpoint.CREATE_GROUP_FOLDER, request)

    async def rename_group_folder(self, request: Request = None) -> Any:
        """Rename a group folder."""
        return await self._call(Endpoint.RENAME_GROUP_FOLDER, request)

    async def delete_group_folder(self, request: Request = None) -> Any:
        """Delete a group folder."""
        return await self._call(Endpoint.DELETE_GROUP_FOLDER, request)


@dataclass
class GatewayAPI:
    """All gateway operations, grouped the way the gateway documents them."""

    _client: HttpClient

    @property
    def client(self) -> HttpClient:
        """Access the underlying command client."""
        return self._client

    @property
    def system(self) -> SystemAPI:
        return SystemAPI(_client=self._client)

    @property
    def message(self) -> MessageAPI:
        return MessageAPI(_client=self._client)

    @property
    def friend(self) -> FriendAPI:
        return FriendAPI(_client=self._client)

    @property
    def group(self) -> GroupAPI:
        return GroupAPI(_client=self._client)

    @property
    def file(self) -> FileAPI:
        return FileAPI(_client=self._client)
