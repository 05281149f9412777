# src/fiction_chat/models/message.py
"""Model for messages exchanged inside a conversation."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fiction_chat.db.session import Base
from fiction_chat.db.time import utcnow
from fiction_chat.models.user import ChatUser


class Message(Base):
    """Plain-text message. Never edited or deleted once written."""

    __tablename__ = "fictionchat_message"
    __table_args__ = (
        Index("ix_message_conversation_created", "conversation_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("fictionchat_user.id"),
        nullable=False,
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fictionchat_conversation.id"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    sender: Mapped[ChatUser] = relationship(ChatUser, lazy="joined")
