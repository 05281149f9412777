# tests/test_migrations.py
"""Tests for the Alembic environment and the bundled revisions."""

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from fiction_chat.core.settings import settings
from fiction_chat.db.session import Base
from fiction_chat.scripts.migrate import MIGRATIONS_DIR, build_config


def _config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_build_config_targets_bundled_migrations():
    cfg = build_config()

    assert cfg.get_main_option("script_location") == MIGRATIONS_DIR
    assert cfg.get_main_option("sqlalchemy.url") == settings.database_url_sync


def test_upgrade_creates_model_tables_and_downgrade_removes_them(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _config(url)
    engine = create_engine(url)

    try:
        command.upgrade(cfg, "head")
        tables = set(inspect(engine).get_table_names())

        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables

        command.downgrade(cfg, "base")

        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
