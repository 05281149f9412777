# tests/services/test_admin.py
"""Tests for the destructive chat reset."""

from sqlalchemy import func, select

from fiction_chat.models import ChatActivity, ChatUser, Conversation, ConversationParticipant, Message
from fiction_chat.services.admin import reset_chat
from fiction_chat.services.message_store import MessageStore
from fiction_chat.services.user_sync import sync_users


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_reset_clears_everything_and_restarts_ids(db_session, host_users, host_config):
    store = MessageStore(db_session)
    sync_users(db_session, host_config)
    first = store.send("1", "2", "before reset")
    store.mark_read("2", first.conversation_id)
    store.send("2", "1", "reply")

    synced = reset_chat(db_session, host_config)

    for model in (ChatActivity, Message, ConversationParticipant, Conversation):
        assert _count(db_session, model) == 0
    assert synced == 2
    assert _count(db_session, ChatUser) == 2

    after = store.send("2", "1", "after reset")
    assert after.conversation_id == 1
    assert after.id == 1


def test_reset_without_resync_leaves_no_users(db_session, u1, u2):
    MessageStore(db_session).send("1", "2", "hello")

    assert reset_chat(db_session, resync=False) == 0
    assert _count(db_session, ChatUser) == 0
    assert _count(db_session, Message) == 0
