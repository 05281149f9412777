"""Persistence of messages, read receipts and conversation listings.

Every write runs in a single transaction on the session handed to the store.
A failure anywhere rolls the whole unit back, so a conversation is never left
behind without the message that caused its creation.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fiction_chat.core.errors import ChatError, NotFoundError, PersistenceError, ValidationError
from fiction_chat.db.time import utcnow
from fiction_chat.models import ChatActivity, ChatUser, Conversation, ConversationParticipant, Message
from fiction_chat.repositories.conversation_repo import (
    ConversationRepository,
    ConversationResolution,
)
from fiction_chat.schemas.conversation import ConversationSummary, LastMessage
from fiction_chat.schemas.message import ChatActivityOut, MessageOut
from fiction_chat.schemas.user import ChatUserOut

__all__ = ["MessageStore", "to_message_out"]

logger = logging.getLogger(__name__)


def to_message_out(message: Message, viewer_id: str | None = None) -> MessageOut:
    """Convert a Message ORM instance (with its sender loaded) to the API schema."""
    return MessageOut(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        content=message.content,
        created_at=message.created_at,
        sender=ChatUserOut.model_validate(message.sender),
        is_from_me=None if viewer_id is None else message.sender_id == str(viewer_id),
    )


class MessageStore:
    """Owns conversation, message and read-receipt rows."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.conversations = ConversationRepository(session)

    @contextmanager
    def _transaction(self, action: str, *, commit: bool = True) -> Iterator[None]:
        """Run a unit of work, rolling everything back on failure.

        Domain errors propagate unchanged; database errors are logged with their
        cause and surfaced as a generic ``PersistenceError``.
        """
        try:
            yield
            if commit:
                self.session.commit()
        except ChatError:
            self.session.rollback()
            raise
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("Failed to %s: %s", action, err, exc_info=True)
            raise PersistenceError() from err

    def send(self, sender_id: str, recipient_id: str, content: str) -> MessageOut:
        """Persist a message from ``sender_id`` to ``recipient_id``.

        Resolves (or creates) the pair's conversation, inserts the message and
        re-reads it joined with the sender's identity, all in one transaction.

        Raises:
            ValidationError: Blank content or a message to oneself.
            NotFoundError: Either user is unknown to the chat.
            PersistenceError: The transaction failed and was rolled back.
        """
        if content is None or not content.strip():
            raise ValidationError("Message content cannot be empty")
        sender_id, recipient_id = str(sender_id), str(recipient_id)

        with self._transaction("send message"):
            resolution = self.conversations.resolve(sender_id, recipient_id)
            message = Message(
                sender_id=sender_id,
                conversation_id=resolution.conversation_id,
                content=content,
            )
            self.session.add(message)
            self.session.flush()
            result = self.session.execute(
                select(Message)
                .where(Message.id == message.id)
                .execution_options(populate_existing=True)
            )
            persisted = to_message_out(result.scalars().one())

        logger.info(
            "Stored message %s in conversation %s (%s -> %s)",
            persisted.id,
            persisted.conversation_id,
            sender_id,
            recipient_id,
        )
        return persisted

    def create_conversation(self, user_id: str, other_id: str) -> ConversationResolution:
        """Resolve the conversation for a pair and commit it if it was created."""
        with self._transaction("create conversation"):
            resolution = self.conversations.resolve(str(user_id), str(other_id))
        return resolution

    def mark_read(self, user_id: str, conversation_id: int) -> ChatActivityOut:
        """Append a read receipt for ``user_id`` stamped with the current time.

        Existing receipts are never updated; each call adds a row.
        """
        user_id = str(user_id)
        with self._transaction("mark conversation read"):
            self._require_membership(conversation_id, user_id)
            activity = ChatActivity(
                user_id=user_id,
                conversation_id=conversation_id,
                last_read=utcnow(),
            )
            self.session.add(activity)
            self.session.flush()
            receipt = ChatActivityOut.model_validate(activity)
        return receipt

    def last_read(self, user_id: str, conversation_id: int) -> datetime | None:
        """Return the newest read-receipt time, or None if the user never read it."""
        with self._transaction("read last-read marker", commit=False):
            result = self.session.execute(
                select(func.max(ChatActivity.last_read)).where(
                    ChatActivity.user_id == str(user_id),
                    ChatActivity.conversation_id == conversation_id,
                )
            )
            return result.scalar()

    def list_messages(self, conversation_id: int, requesting_user_id: str) -> list[MessageOut]:
        """Return a conversation's messages oldest first.

        Raises:
            NotFoundError: The requesting user is not a participant.
        """
        viewer = str(requesting_user_id)
        with self._transaction("list messages", commit=False):
            self._require_membership(conversation_id, viewer)
            result = self.session.execute(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.created_at.asc(), Message.id.asc())
            )
            return [to_message_out(message, viewer) for message in result.scalars()]

    def list_conversations(self, user_id: str) -> list[ConversationSummary]:
        """Return every conversation of ``user_id``, newest conversation first."""
        user_id = str(user_id)
        with self._transaction("list conversations", commit=False):
            member_of = select(ConversationParticipant.conversation_id).where(
                ConversationParticipant.user_id == user_id
            )
            conversations = list(
                self.session.execute(
                    select(Conversation)
                    .where(Conversation.id.in_(member_of))
                    .order_by(Conversation.created_at.desc(), Conversation.id.desc())
                ).scalars()
            )
            if not conversations:
                return []

            ids = [conversation.id for conversation in conversations]
            participants = self._participants_by_conversation(ids)
            last_messages = self._last_messages(ids)
            unread = self._unread_counts(user_id, ids)

            summaries = []
            for conversation in conversations:
                members = participants.get(conversation.id, [])
                other = next((member for member in members if member.id != user_id), None)
                last = last_messages.get(conversation.id)
                summaries.append(
                    ConversationSummary(
                        id=conversation.id,
                        created_at=conversation.created_at,
                        participants=members,
                        last_message=(
                            LastMessage(
                                id=last.id,
                                content=last.content,
                                created_at=last.created_at,
                                sender_id=last.sender_id,
                            )
                            if last is not None
                            else None
                        ),
                        other_user=other,
                        other_user_id=other.id if other is not None else None,
                        unread_count=unread.get(conversation.id, 0),
                    )
                )
            return summaries

    def list_available_users(self, user_id: str) -> list[ChatUserOut]:
        """Return every mirrored user other than ``user_id``."""
        with self._transaction("list users", commit=False):
            result = self.session.execute(
                select(ChatUser)
                .where(ChatUser.id != str(user_id))
                .order_by(ChatUser.fullname, ChatUser.id)
            )
            return [ChatUserOut.model_validate(user) for user in result.scalars()]

    def _require_membership(self, conversation_id: int, user_id: str) -> None:
        if not self.conversations.is_participant(conversation_id, user_id):
            raise NotFoundError("Conversation not found")

    def _participants_by_conversation(self, ids: list[int]) -> dict[int, list[ChatUserOut]]:
        rows = self.session.execute(
            select(ConversationParticipant.conversation_id, ChatUser)
            .join(ChatUser, ChatUser.id == ConversationParticipant.user_id)
            .where(ConversationParticipant.conversation_id.in_(ids))
            .order_by(ConversationParticipant.conversation_id, ConversationParticipant.id)
        )
        grouped: dict[int, list[ChatUserOut]] = {}
        for conversation_id, user in rows:
            grouped.setdefault(conversation_id, []).append(ChatUserOut.model_validate(user))
        return grouped

    def _last_messages(self, ids: list[int]) -> dict[int, Message]:
        ranked = (
            select(
                Message.id.label("message_id"),
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("position"),
            )
            .where(Message.conversation_id.in_(ids))
            .subquery()
        )
        result = self.session.execute(
            select(Message)
            .join(ranked, ranked.c.message_id == Message.id)
            .where(ranked.c.position == 1)
        )
        return {message.conversation_id: message for message in result.scalars()}

    def _unread_counts(self, user_id: str, ids: list[int]) -> dict[int, int]:
        # Unread = messages from others newer than the user's latest receipt.
        last_read = (
            select(func.max(ChatActivity.last_read))
            .where(
                ChatActivity.user_id == user_id,
                ChatActivity.conversation_id == Message.conversation_id,
            )
            .correlate(Message)
            .scalar_subquery()
        )
        rows = self.session.execute(
            select(Message.conversation_id, func.count(Message.id))
            .where(
                Message.conversation_id.in_(ids),
                Message.sender_id != user_id,
                or_(last_read.is_(None), Message.created_at > last_read),
            )
            .group_by(Message.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in rows}
