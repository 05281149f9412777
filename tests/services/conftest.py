# tests/services/conftest.py
from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, Text, insert
from sqlalchemy.engine import Engine


@pytest.fixture()
def host_config() -> dict[str, str | None]:
    """Column mapping for the host application's user table."""
    return {
        "table_name": "app_users",
        "id_column": "user_id",
        "fullname_column": "display_name",
        "picture_column": "avatar_url",
    }


@pytest.fixture()
def host_users(engine: Engine) -> Iterator[Table]:
    """Create a host user table with two users next to the chat tables."""
    metadata = MetaData()
    table = Table(
        "app_users",
        metadata,
        Column("user_id", Integer, primary_key=True),
        Column("display_name", String(100)),
        Column("avatar_url", Text, nullable=True),
    )
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            insert(table),
            [
                {"user_id": 1, "display_name": "Alice Archer", "avatar_url": "https://img/1.png"},
                {"user_id": 2, "display_name": "Bob Baker", "avatar_url": None},
            ],
        )
    yield table
    metadata.drop_all(engine)
