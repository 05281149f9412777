"""Socket frame schemas.

Inbound frames are ``{"type": ..., "payload": {...}}`` JSON objects. Only the
types in ``FrameType`` are acted on; anything else is ignored so older servers
tolerate newer clients.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .common import CamelModel
from .message import ChatActivityOut, MessageCreate, MessageOut


class FrameType(str, Enum):
    """Inbound control frames understood by the connection controller."""

    MARK_AS_READ = "MARK_AS_READ"
    SEND_MESSAGE = "SEND_MESSAGE"


class OutboundType(str, Enum):
    """Frames the server pushes to clients."""

    CONNECTION_SUCCESS = "CONNECTION_SUCCESS"
    NEW_MESSAGE = "NEW_MESSAGE"
    MESSAGE_SENT = "MESSAGE_SENT"
    MARK_AS_READ_SUCCESS = "MARK_AS_READ_SUCCESS"
    ERROR = "ERROR"


class InboundFrame(BaseModel):
    """Envelope of every client frame."""

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)

    def frame_type(self) -> FrameType | None:
        """Return the known frame type, or None for unrecognised types."""
        try:
            return FrameType(self.type)
        except ValueError:
            return None


class MarkAsReadPayload(CamelModel):
    """Payload of ``MARK_AS_READ``."""

    conversation_id: int


SendMessagePayload = MessageCreate


def connection_success_frame(user_id: str) -> dict[str, Any]:
    return {"type": OutboundType.CONNECTION_SUCCESS.value, "userId": user_id}


def new_message_frame(message: MessageOut, recipient_id: str) -> dict[str, Any]:
    """Frame pushed to a recipient's live session when a message arrives."""
    return {"type": OutboundType.NEW_MESSAGE.value, **message.to_wire(), "toId": recipient_id}


def message_sent_frame(message: MessageOut) -> dict[str, Any]:
    return {"type": OutboundType.MESSAGE_SENT.value, **message.to_wire()}


def mark_as_read_frame(activity: ChatActivityOut) -> dict[str, Any]:
    wire = activity.to_wire()
    return {
        "type": OutboundType.MARK_AS_READ_SUCCESS.value,
        "conversationId": wire["conversationId"],
        "lastRead": wire["lastRead"],
    }


def error_frame(error: dict[str, Any]) -> dict[str, Any]:
    return {"type": OutboundType.ERROR.value, **error}
