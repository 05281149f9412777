"""Message and read-receipt Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from .common import CamelModel, coerce_user_id
from .user import ChatUserOut


class MessageCreate(CamelModel):
    """Body of a send-message request.

    Blank content is rejected by the message store rather than here so that
    REST and socket callers get the same error.
    """

    to_id: str = Field(..., description="Recipient user id")
    content: str = Field(..., description="Message text")

    @field_validator("to_id", mode="before")
    @classmethod
    def coerce_to_id(cls, value: object) -> object:
        return coerce_user_id(value)


class MessageOut(CamelModel):
    """A persisted message enriched with its sender's identity."""

    id: int
    conversation_id: int
    sender_id: str
    content: str
    created_at: datetime
    sender: ChatUserOut
    is_from_me: bool | None = Field(
        None,
        description="Whether the requesting user sent this message (history reads only)",
    )


class ChatActivityOut(CamelModel):
    """A single appended read-receipt row."""

    id: int
    user_id: str
    conversation_id: int
    last_read: datetime
