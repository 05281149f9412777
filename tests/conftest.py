# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("SYNC_USERS_ON_STARTUP", "false")

from fiction_chat.api.v1.dependencies import get_session_factory
from fiction_chat.db.session import Base, enable_sqlite_savepoints
from fiction_chat.db.session import get_db as app_get_session
from fiction_chat.main import app as fastapi_app
from fiction_chat.models import ChatUser
from fiction_chat.services.session_registry import SessionRegistry
from tests.helpers import auth_headers


@pytest.fixture()
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite per test so every session gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'chat.db'}",
        connect_args={"check_same_thread": False, "timeout": 5},
    )
    enable_sqlite_savepoints(engine)

    @event.listens_for(engine, "connect")
    def _use_wal(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
        dbapi_connection.execute("PRAGMA journal_mode=WAL")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory(expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.session_registry = SessionRegistry()
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., ChatUser]:
    """Return a factory that persists and commits a mirrored chat user."""

    def _make_user(user_id: str, fullname: str | None = None) -> ChatUser:
        user = ChatUser(id=user_id, real_user_id=user_id, fullname=fullname or f"User {user_id}")
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def u1(make_user: Callable[..., ChatUser]) -> ChatUser:
    return make_user("1", "Alice Archer")


@pytest.fixture()
def u2(make_user: Callable[..., ChatUser]) -> ChatUser:
    return make_user("2", "Bob Baker")


@pytest.fixture()
def u3(make_user: Callable[..., ChatUser]) -> ChatUser:
    return make_user("3", "Carol Cook")


@pytest.fixture()
def u1_headers(u1: ChatUser) -> dict[str, str]:
    return auth_headers(u1.id)


@pytest.fixture()
def u2_headers(u2: ChatUser) -> dict[str, str]:
    return auth_headers(u2.id)
