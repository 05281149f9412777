"""Data access helpers for two-party conversations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fiction_chat.core.errors import NotFoundError, PersistenceError, ValidationError
from fiction_chat.models import ChatUser, Conversation, ConversationParticipant, make_pair_key

__all__ = ["ConversationRepository", "ConversationResolution", "ResolutionStatus"]

logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    """Outcome of resolving the conversation for a user pair."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class ConversationResolution:
    """Conversation id for a pair together with how it was obtained."""

    conversation_id: int
    status: ResolutionStatus

    @property
    def created(self) -> bool:
        return self.status is ResolutionStatus.CREATED


class ConversationRepository:
    """Finds or creates the single conversation shared by two users.

    The repository never commits. Callers own the surrounding transaction so
    that conversation creation and whatever follows it (for example inserting
    the first message) succeed or fail together.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def find(self, user_a: str, user_b: str) -> Conversation | None:
        """Return the conversation between two users, in either order."""
        result = self.session.execute(
            select(Conversation).where(Conversation.pair_key == make_pair_key(user_a, user_b))
        )
        return result.scalars().first()

    def is_participant(self, conversation_id: int, user_id: str) -> bool:
        """Return True if ``user_id`` is a member of the conversation."""
        result = self.session.execute(
            select(ConversationParticipant.id).where(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == str(user_id),
            )
        )
        return result.first() is not None

    def participant_ids(self, conversation_id: int) -> list[str]:
        """Return the user ids taking part in a conversation."""
        result = self.session.execute(
            select(ConversationParticipant.user_id)
            .where(ConversationParticipant.conversation_id == conversation_id)
            .order_by(ConversationParticipant.user_id)
        )
        return list(result.scalars())

    def resolve(self, user_a: str, user_b: str) -> ConversationResolution:
        """Return the pair's conversation, creating it if it does not exist yet.

        Args:
            user_a: One participant's user id.
            user_b: The other participant's user id.

        Returns:
            The conversation id and whether this call created it.

        Raises:
            ValidationError: If both ids refer to the same user.
            NotFoundError: If either user has not been mirrored into the chat.
            PersistenceError: If creation lost a race but the winning row cannot be read.

        Notes:
            The insert runs inside a SAVEPOINT. When a concurrent writer commits the
            same pair first, the unique ``pair_key`` rejects our insert; only the
            savepoint is rolled back and the winner's row is returned instead.
        """
        user_a, user_b = str(user_a), str(user_b)
        if user_a == user_b:
            raise ValidationError("A user cannot start a conversation with themself")

        existing = self.find(user_a, user_b)
        if existing is not None:
            return ConversationResolution(existing.id, ResolutionStatus.ALREADY_EXISTS)

        self._ensure_users_exist(user_a, user_b)

        pair_key = make_pair_key(user_a, user_b)
        try:
            with self.session.begin_nested():
                conversation = Conversation(pair_key=pair_key)
                conversation.participants = [
                    ConversationParticipant(user_id=user_a),
                    ConversationParticipant(user_id=user_b),
                ]
                self.session.add(conversation)
                self.session.flush()
        except IntegrityError as err:
            logger.info("Conversation %s was created concurrently; re-reading winner", pair_key)
            winner = self.find(user_a, user_b)
            if winner is None:
                raise PersistenceError("Failed to create conversation") from err
            return ConversationResolution(winner.id, ResolutionStatus.ALREADY_EXISTS)

        logger.info("Created conversation %s for %s", conversation.id, pair_key)
        return ConversationResolution(conversation.id, ResolutionStatus.CREATED)

    def _ensure_users_exist(self, *user_ids: str) -> None:
        result = self.session.execute(select(ChatUser.id).where(ChatUser.id.in_(user_ids)))
        missing = set(user_ids) - set(result.scalars())
        if missing:
            raise NotFoundError("User not found")
