# tests/services/test_session_registry.py
"""Tests for the per-user live session registry."""

import asyncio

import pytest

from fiction_chat.services.session_registry import (
    CLOSE_GOING_AWAY,
    CLOSE_NORMAL,
    ChatConnection,
    SessionRegistry,
)
from tests.helpers import FakeConnection


def test_fake_connection_satisfies_protocol() -> None:
    assert isinstance(FakeConnection(), ChatConnection)


@pytest.mark.asyncio
async def test_register_and_lookup() -> None:
    registry = SessionRegistry()
    connection = FakeConnection()

    previous = await registry.register("1", connection)

    assert previous is None
    assert registry.lookup("1") is connection
    assert registry.lookup(1) is connection
    assert "1" in registry
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_new_connection_supersedes_previous() -> None:
    registry = SessionRegistry()
    old, new = FakeConnection(), FakeConnection()

    await registry.register("1", old)
    previous = await registry.register("1", new)

    assert previous is old
    assert old.closed_with is not None
    assert old.closed_with[0] == CLOSE_NORMAL
    assert registry.lookup("1") is new
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_late_unregister_of_superseded_connection_is_ignored() -> None:
    registry = SessionRegistry()
    old, new = FakeConnection(), FakeConnection()
    await registry.register("1", old)
    await registry.register("1", new)

    assert registry.unregister("1", old) is False
    assert registry.lookup("1") is new

    assert registry.unregister("1", new) is True
    assert registry.lookup("1") is None


@pytest.mark.asyncio
async def test_failing_close_of_previous_connection_does_not_break_register() -> None:
    registry = SessionRegistry()
    old = FakeConnection(fail_close=True)
    new = FakeConnection()
    await registry.register("1", old)

    await registry.register("1", new)

    assert registry.lookup("1") is new


@pytest.mark.asyncio
async def test_concurrent_registrations_leave_one_entry() -> None:
    registry = SessionRegistry()
    connections = [FakeConnection() for _ in range(5)]

    await asyncio.gather(*(registry.register("1", c) for c in connections))

    assert len(registry) == 1
    survivor = registry.lookup("1")
    assert survivor in connections
    assert survivor.is_open
    assert sum(1 for c in connections if c.is_open) == 1


@pytest.mark.asyncio
async def test_close_all() -> None:
    registry = SessionRegistry()
    first, second = FakeConnection(), FakeConnection(fail_close=True)
    await registry.register("1", first)
    await registry.register("2", second)

    await registry.close_all()

    assert len(registry) == 0
    assert first.closed_with == (CLOSE_GOING_AWAY, None)
    assert registry.active_user_ids() == []
