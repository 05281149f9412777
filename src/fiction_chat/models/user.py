"""SQLAlchemy model for users mirrored from the host application."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fiction_chat.db.session import Base


class ChatUser(Base):
    """Chat-side copy of a host application user.

    Rows are written only by the user mirroring job; the chat core treats them
    as read-only and references them through foreign keys.
    """

    __tablename__ = "fictionchat_user"

    # Same value as the host application's user id.
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    real_user_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    fullname: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(Text, nullable=True)
