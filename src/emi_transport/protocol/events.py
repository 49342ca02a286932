"""Event definitions for the gateway event stream.

Every frame pushed by the gateway carries one event envelope:

    {
        "type": "message_receive",
        "self_id": 10001,
        "time": 1718000000,
        "data": {...}
    }

The envelope is parsed into a RawEvent as soon as the frame arrives. The
``data`` payload stays untyped until the dispatcher looks the event type up
in its registry and validates the payload into the matching BaseEvent
subclass.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Event types pushed by the gateway."""

    # Bot lifecycle
    BOT_OFFLINE = "bot_offline"

    # Messages
    MESSAGE_RECEIVE = "message_receive"
    MESSAGE_RECALL = "message_recall"

    # Requests and invitations
    FRIEND_REQUEST = "friend_request"
    GROUP_JOIN_REQUEST = "group_join_request"
    GROUP_INVITED_JOIN_REQUEST = "group_invited_join_request"
    GROUP_INVITATION = "group_invitation"

    # Friend notices
    FRIEND_NUDGE = "friend_nudge"
    FRIEND_FILE_UPLOAD = "friend_file_upload"

    # Group notices
    GROUP_ADMIN_CHANGE = "group_admin_change"
    GROUP_ESSENCE_MESSAGE_CHANGE = "group_essence_message_change"
    GROUP_MEMBER_INCREASE = "group_member_increase"
    GROUP_MEMBER_DECREASE = "group_member_decrease"
    GROUP_NAME_CHANGE = "group_name_change"
    GROUP_MESSAGE_REACTION = "group_message_reaction"
    GROUP_MUTE = "group_mute"
    GROUP_WHOLE_MUTE = "group_whole_mute"
    GROUP_NUDGE = "group_nudge"
    GROUP_FILE_UPLOAD = "group_file_upload"


class RawEvent(BaseModel):
    """Wire-level event envelope.

    Produced once per inbound frame and handed to the dispatcher as is.
    ``data`` is the JSON payload exactly as received.
    """

    model_config = ConfigDict(frozen=True)

    type: str = ""
    self_id: int = 0
    time: int = 0
    data: Any = None


class BaseEvent(BaseModel):
    """Base class for typed event payloads.

    Subclasses set ``event_type`` and declare the payload fields. Unknown
    fields are kept so newer gateways don't break older models, and every
    declared field has a zero default so sparse payloads still decode.
    """

    model_config = ConfigDict(extra="allow")

    event_type: ClassVar[str] = ""

    @classmethod
    def decode(cls, data: Any) -> BaseEvent:
        """Validate a raw ``data`` payload into this event type."""
        return cls.model_validate({} if data is None else data)


# =============================================================================
# Shared payload pieces
# =============================================================================


class IncomingSegment(BaseModel):
    """One segment of a received message (text, mention, image, ...)."""

    model_config = ConfigDict(extra="allow")

    type: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Standard events
# =============================================================================


class BotOfflineEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.BOT_OFFLINE.value

    reason: str = ""


class MessageReceiveEvent(BaseEvent):
    """A private, group or temporary-session message was received."""

    event_type: ClassVar[str] = EventType.MESSAGE_RECEIVE.value

    message_scene: str = ""  # "friend" | "group" | "temp"
    peer_id: int = 0
    message_seq: int = 0
    sender_id: int = 0
    time: int = 0
    segments: list[IncomingSegment] = Field(default_factory=list)
    friend: dict[str, Any] | None = None
    group: dict[str, Any] | None = None
    group_member: dict[str, Any] | None = None

    def plain_text(self) -> str:
        """Concatenate the text segments of the message."""
        return "".join(str(s.data.get("text", "")) for s in self.segments if s.type == "text")


class MessageRecallEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.MESSAGE_RECALL.value

    message_scene: str = ""
    peer_id: int = 0
    message_seq: int = 0
    sender_id: int = 0
    operator_id: int = 0
    display_suffix: str = ""


class FriendRequestEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.FRIEND_REQUEST.value

    initiator_id: int = 0
    initiator_uid: str = ""
    comment: str = ""
    via: str = ""


class GroupJoinRequestEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_JOIN_REQUEST.value

    group_id: int = 0
    notification_seq: int = 0
    is_filtered: bool = False
    initiator_id: int = 0
    comment: str = ""


class GroupInvitedJoinRequestEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_INVITED_JOIN_REQUEST.value

    group_id: int = 0
    notification_seq: int = 0
    initiator_id: int = 0
    target_user_id: int = 0


class GroupInvitationEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_INVITATION.value

    group_id: int = 0
    invitation_seq: int = 0
    initiator_id: int = 0


class FriendNudgeEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.FRIEND_NUDGE.value

    user_id: int = 0
    is_self_send: bool = False
    is_self_receive: bool = False
    display_action: str = ""
    display_suffix: str = ""
    display_action_img_url: str = ""


class FriendFileUploadEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.FRIEND_FILE_UPLOAD.value

    user_id: int = 0
    file_id: str = ""
    file_name: str = ""
    file_size: int = 0
    file_hash: str = ""
    is_self: bool = False


class GroupAdminChangeEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_ADMIN_CHANGE.value

    group_id: int = 0
    user_id: int = 0
    is_set: bool = False


class GroupEssenceMessageChangeEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_ESSENCE_MESSAGE_CHANGE.value

    group_id: int = 0
    message_seq: int = 0
    is_set: bool = False


class GroupMemberIncreaseEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_MEMBER_INCREASE.value

    group_id: int = 0
    user_id: int = 0
    operator_id: int | None = None
    invitor_id: int | None = None


class GroupMemberDecreaseEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_MEMBER_DECREASE.value

    group_id: int = 0
    user_id: int = 0
    operator_id: int | None = None


class GroupNameChangeEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_NAME_CHANGE.value

    group_id: int = 0
    new_group_name: str = ""
    operator_id: int = 0


class GroupMessageReactionEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_MESSAGE_REACTION.value

    group_id: int = 0
    user_id: int = 0
    message_seq: int = 0
    face_id: str = ""
    is_add: bool = True


class GroupMuteEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_MUTE.value

    group_id: int = 0
    user_id: int = 0
    operator_id: int = 0
    duration: int = 0  # seconds, 0 = unmute


class GroupWholeMuteEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_WHOLE_MUTE.value

    group_id: int = 0
    operator_id: int = 0
    is_mute: bool = False


class GroupNudgeEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_NUDGE.value

    group_id: int = 0
    sender_id: int = 0
    receiver_id: int = 0
    display_action: str = ""
    display_suffix: str = ""
    display_action_img_url: str = ""


class GroupFileUploadEvent(BaseEvent):
    event_type: ClassVar[str] = EventType.GROUP_FILE_UPLOAD.value

    group_id: int = 0
    user_id: int = 0
    file_id: str = ""
    file_name: str = ""
    file_size: int = 0


DEFAULT_EVENTS: tuple[type[BaseEvent], ...] = (
    BotOfflineEvent,
    MessageReceiveEvent,
    MessageRecallEvent,
    FriendRequestEvent,
    GroupJoinRequestEvent,
    GroupInvitedJoinRequestEvent,
    GroupInvitationEvent,
    FriendNudgeEvent,
    FriendFileUploadEvent,
    GroupAdminChangeEvent,
    GroupEssenceMessageChangeEvent,
    GroupMemberIncreaseEvent,
    GroupMemberDecreaseEvent,
    GroupNameChangeEvent,
    GroupMessageReactionEvent,
    GroupMuteEvent,
    GroupWholeMuteEvent,
    GroupNudgeEvent,
    GroupFileUploadEvent,
)


def default_event_registry() -> dict[str, type[BaseEvent]]:
    """Return a fresh mapping of every standard event type to its model."""
    return {event.event_type: event for event in DEFAULT_EVENTS}
