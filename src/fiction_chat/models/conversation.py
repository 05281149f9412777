"""Models describing two-party conversations and their membership."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fiction_chat.db.session import Base
from fiction_chat.db.time import utcnow

PAIR_KEY_SEPARATOR = ":"


def make_pair_key(user_a: str, user_b: str) -> str:
    """Return the canonical key for an unordered pair of user ids."""
    low, high = sorted((str(user_a), str(user_b)))
    return f"{low}{PAIR_KEY_SEPARATOR}{high}"


class Conversation(Base):
    """A thread between exactly two users.

    Conversations are immutable once created and are only removed by a full
    chat reset.
    """

    __tablename__ = "fictionchat_conversation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    # Unique per unordered participant pair; concurrent creators race on this constraint.
    pair_key: Mapped[str] = mapped_column(String(511), unique=True, nullable=False)

    participants: Mapped[list[ConversationParticipant]] = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )


class ConversationParticipant(Base):
    """Membership row linking a user to a conversation."""

    __tablename__ = "fictionchat_conversation_participant"
    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_participant_conversation_user"),
        Index("ix_participant_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fictionchat_conversation.id"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("fictionchat_user.id"),
        nullable=False,
    )

    conversation: Mapped[Conversation] = relationship("Conversation", back_populates="participants")
