# src/fiction_chat/models/chat_activity.py
"""Read-receipt log."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fiction_chat.db.session import Base
from fiction_chat.db.time import utcnow


class ChatActivity(Base):
    """Marker that a user read a conversation up to ``last_read``.

    Rows are appended, never updated. The effective last-read time for a user
    and conversation is the maximum over their rows.
    """

    __tablename__ = "fictionchat_chat_activity"
    __table_args__ = (
        Index("ix_chat_activity_user_conversation", "user_id", "conversation_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("fictionchat_user.id"),
        nullable=False,
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fictionchat_conversation.id"),
        nullable=False,
    )
    last_read: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
