# tests/services/test_user_sync.py
"""Tests for mirroring host users into the chat user table."""

import pytest
from sqlalchemy import select

from fiction_chat.core.errors import ValidationError
from fiction_chat.core.settings import settings
from fiction_chat.models import ChatUser
from fiction_chat.services.user_sync import sync_users


def _users(session) -> dict[str, ChatUser]:
    session.expire_all()
    return {user.id: user for user in session.execute(select(ChatUser)).scalars()}


def test_sync_imports_host_users(db_session, host_users, host_config):
    count = sync_users(db_session, host_config)

    users = _users(db_session)
    assert count == 2
    assert set(users) == {"1", "2"}
    assert users["1"].real_user_id == "1"
    assert users["1"].fullname == "Alice Archer"
    assert users["1"].profile_picture == "https://img/1.png"
    assert users["2"].profile_picture is None


def test_sync_is_idempotent_and_updates_names(db_session, engine, host_users, host_config):
    sync_users(db_session, host_config)
    with engine.begin() as conn:
        conn.execute(
            host_users.update().where(host_users.c.user_id == 2).values(display_name="Robert Baker")
        )

    count = sync_users(db_session, host_config)

    users = _users(db_session)
    assert count == 2
    assert len(users) == 2
    assert users["2"].fullname == "Robert Baker"


def test_sync_without_picture_column(db_session, host_users, host_config):
    host_config["picture_column"] = None

    assert sync_users(db_session, host_config) == 2
    assert all(user.profile_picture is None for user in _users(db_session).values())


def test_sync_reads_from_separate_source(db_session, engine, host_users, host_config):
    with engine.connect() as source:
        assert sync_users(db_session, host_config, source=source) == 2
    assert set(_users(db_session)) == {"1", "2"}


def test_unconfigured_sync_is_a_no_op(db_session, monkeypatch):
    monkeypatch.setattr(settings, "host_user_table", None)

    assert sync_users(db_session) == 0
    assert _users(db_session) == {}


def test_settings_provide_default_mapping(db_session, host_users, monkeypatch):
    monkeypatch.setattr(settings, "host_user_table", "app_users")
    monkeypatch.setattr(settings, "host_user_id_column", "user_id")
    monkeypatch.setattr(settings, "host_user_fullname_column", "display_name")
    monkeypatch.setattr(settings, "host_user_picture_column", "avatar_url")

    assert sync_users(db_session) == 2


def test_missing_table_is_rejected(db_session, host_config):
    host_config["table_name"] = "no_such_table"

    with pytest.raises(ValidationError):
        sync_users(db_session, host_config)


def test_missing_column_is_rejected(db_session, host_users, host_config):
    host_config["fullname_column"] = "name"

    with pytest.raises(ValidationError) as exc_info:
        sync_users(db_session, host_config)

    assert "name" in str(exc_info.value)
