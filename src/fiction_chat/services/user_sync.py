"""Mirror host application users into ``fictionchat_user``.

The host's table and column names come from configuration. The table is
reflected rather than interpolated into SQL, so only existing identifiers can
be read.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy import MetaData, Table, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.orm import Session

from fiction_chat.core.errors import PersistenceError, ValidationError
from fiction_chat.core.settings import settings
from fiction_chat.models import ChatUser

__all__ = ["sync_users"]

logger = logging.getLogger(__name__)


def _reflect_host_table(bind: Engine | Connection, table_name: str) -> Table:
    try:
        return Table(table_name, MetaData(), autoload_with=bind)
    except NoSuchTableError as err:
        raise ValidationError(f"Host user table {table_name!r} does not exist") from err


def sync_users(
    db: Session,
    table_config: Mapping[str, str | None] | None = None,
    *,
    source: Engine | Connection | None = None,
) -> int:
    """Upsert every host user into the chat user table.

    Args:
        db: Session bound to the chat database; the sync commits on it.
        table_config: Mapping with ``table_name``, ``id_column``,
            ``fullname_column`` and optional ``picture_column``. Defaults to
            ``settings.host_user_table_config``.
        source: Where the host table lives. Defaults to the chat database.

    Returns:
        Number of users written. Zero when no host table is configured.

    Raises:
        ValidationError: The configured table or columns do not exist.
        PersistenceError: Writing the users failed and was rolled back.
    """
    config = table_config if table_config is not None else settings.host_user_table_config
    if not config:
        logger.info("Host user table not configured; skipping user sync")
        return 0

    table_name = str(config["table_name"])
    id_column = str(config.get("id_column") or "id")
    fullname_column = str(config.get("fullname_column") or "fullname")
    picture_column = config.get("picture_column")

    host_table = _reflect_host_table(source if source is not None else db.get_bind(), table_name)
    wanted = [id_column, fullname_column] + ([picture_column] if picture_column else [])
    missing = [name for name in wanted if name not in host_table.c]
    if missing:
        raise ValidationError(f"Host user table {table_name!r} lacks columns: {', '.join(missing)}")

    columns = [
        host_table.c[id_column].label("id"),
        host_table.c[fullname_column].label("fullname"),
    ]
    if picture_column:
        columns.append(host_table.c[picture_column].label("profile_picture"))

    logger.info("Syncing users from %s", table_name)
    try:
        if source is not None:
            rows = source.execute(select(*columns)).mappings().all()
        else:
            rows = db.execute(select(*columns)).mappings().all()

        for row in rows:
            user_id = str(row["id"])
            db.merge(
                ChatUser(
                    id=user_id,
                    real_user_id=user_id,
                    fullname=row["fullname"] or user_id,
                    profile_picture=row.get("profile_picture"),
                )
            )
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("User sync from %s failed: %s", table_name, err, exc_info=True)
        raise PersistenceError("Failed to sync users") from err

    logger.info("Synced %d users from %s", len(rows), table_name)
    return len(rows)
