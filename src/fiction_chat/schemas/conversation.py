"""Conversation-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from .common import CamelModel, coerce_user_id
from .user import ChatUserOut


class ConversationCreate(CamelModel):
    """Body of a create-convo request."""

    to_id: str = Field(..., description="The other participant's user id")

    @field_validator("to_id", mode="before")
    @classmethod
    def coerce_to_id(cls, value: object) -> object:
        return coerce_user_id(value)


class ConversationCreated(CamelModel):
    """Result of resolving a conversation for a user pair."""

    conversation_id: int
    created: bool = Field(..., description="False when the pair already had a conversation")


class LastMessage(CamelModel):
    """Compact preview of the newest message in a conversation."""

    id: int
    content: str
    created_at: datetime
    sender_id: str


class ConversationSummary(CamelModel):
    """One entry of a user's conversation list."""

    id: int
    created_at: datetime
    participants: list[ChatUserOut]
    last_message: LastMessage | None = None
    other_user: ChatUserOut | None = None
    other_user_id: str | None = None
    unread_count: int = 0
