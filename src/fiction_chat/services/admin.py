"""Destructive administration for test and staging environments."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy import bindparam, delete, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fiction_chat.core.errors import PersistenceError
from fiction_chat.models import ChatActivity, ChatUser, Conversation, ConversationParticipant, Message
from fiction_chat.services.user_sync import sync_users

__all__ = ["CHAT_MODELS", "reset_chat"]

logger = logging.getLogger(__name__)

# Children first so foreign keys are satisfied while deleting.
CHAT_MODELS = (ChatActivity, Message, ConversationParticipant, Conversation, ChatUser)


def _table_names() -> list[str]:
    return [model.__table__.name for model in CHAT_MODELS]


def _clear_postgresql(db: Session) -> None:
    names = ", ".join(_table_names())
    db.execute(text(f"TRUNCATE TABLE {names} RESTART IDENTITY CASCADE"))


def _clear_generic(db: Session) -> None:
    for model in CHAT_MODELS:
        db.execute(delete(model))

    if db.get_bind().dialect.name != "sqlite":
        return
    # INTEGER PRIMARY KEY restarts at 1 once the table is empty; AUTOINCREMENT
    # tables also keep a counter in sqlite_sequence.
    has_sequence = db.execute(
        text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
    ).first()
    if has_sequence:
        db.execute(
            text("DELETE FROM sqlite_sequence WHERE name IN :names").bindparams(
                bindparam("names", expanding=True)
            ),
            {"names": _table_names()},
        )


def reset_chat(
    db: Session,
    table_config: Mapping[str, str | None] | None = None,
    *,
    resync: bool = True,
) -> int:
    """Delete all chat data, restart id sequences and re-import users.

    Irreversible. Conversations, messages, participants, read receipts and
    mirrored users are removed in one transaction; afterwards the next
    conversation gets id 1 again.

    Returns:
        Number of users re-imported.
    """
    dialect = db.get_bind().dialect.name
    try:
        if dialect == "postgresql":
            _clear_postgresql(db)
        else:
            _clear_generic(db)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Failed to reset chat: %s", err, exc_info=True)
        raise PersistenceError("Failed to reset chat") from err

    logger.warning("Chat data reset (%s)", dialect)
    if not resync:
        return 0
    return sync_users(db, table_config)
