"""Unit tests for the chat ORM models.

These tests verify basic mapping correctness: table names, the unique pair
key that serialises conversation creation, and relationship wiring.
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import attributes

from fiction_chat.models import (
    ChatActivity,
    ChatUser,
    Conversation,
    ConversationParticipant,
    Message,
    make_pair_key,
)


def test_table_names():
    """Model classes expose expected __tablename__ values."""
    assert ChatUser.__tablename__ == "fictionchat_user"
    assert Conversation.__tablename__ == "fictionchat_conversation"
    assert ConversationParticipant.__tablename__ == "fictionchat_conversation_participant"
    assert Message.__tablename__ == "fictionchat_message"
    assert ChatActivity.__tablename__ == "fictionchat_chat_activity"


def test_pair_key_is_order_independent():
    assert make_pair_key("1", "2") == make_pair_key("2", "1") == "1:2"
    assert make_pair_key(10, 9) == "10:9"


def test_relationships_are_instrumented_attributes():
    for attr in (Conversation.participants, ConversationParticipant.conversation, Message.sender):
        assert isinstance(attr, attributes.InstrumentedAttribute)


def test_pair_key_is_unique(db_session, u1, u2):
    db_session.add(Conversation(pair_key=make_pair_key("1", "2")))
    db_session.commit()

    db_session.add(Conversation(pair_key=make_pair_key("2", "1")))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_participant_is_unique_per_conversation(db_session, u1, u2):
    conversation = Conversation(pair_key="1:2")
    conversation.participants = [
        ConversationParticipant(user_id="1"),
        ConversationParticipant(user_id="1"),
    ]
    db_session.add(conversation)

    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
