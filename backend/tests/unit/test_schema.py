"""
Unit tests: schema synchronization creates missing tables only, is idempotent,
and refuses to touch a stale table.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.ext.asyncio import create_async_engine

from core.discovery import discover_entity_modules, entity_tables
from core.errors import SchemaSyncError
from core.schema import check_schema_mismatch, missing_tables, synchronize_schema


@pytest.fixture
def tables():
    return entity_tables(discover_entity_modules("models/*.py"))


def _create_stale_users_table(db_file: Path) -> None:
    engine = create_engine(f"sqlite:///{db_file.as_posix()}")
    with engine.connect() as conn:
        # Old shape of users: no email column.
        conn.execute(text("""
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username VARCHAR(64) NOT NULL
            )
        """))
        conn.commit()
    engine.dispose()


@pytest.mark.asyncio
async def test_sync_creates_tables_then_is_a_no_op(tmp_path: Path, tables) -> None:
    """First run creates every table; the second run against the same schema creates nothing."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{(tmp_path / 'app.db').as_posix()}")
    try:
        assert sorted(await missing_tables(engine, tables)) == ["logs", "schema_migrations", "users"]

        created = await synchronize_schema(engine, tables)
        assert sorted(created) == ["logs", "schema_migrations", "users"]

        assert await synchronize_schema(engine, tables) == []
        assert await missing_tables(engine, tables) == []
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_sync_only_creates_discovered_tables(tmp_path: Path) -> None:
    engine = create_async_engine(f"sqlite+aiosqlite:///{(tmp_path / 'app.db').as_posix()}")
    try:
        created = await synchronize_schema(engine, entity_tables(["models.user"]))
        assert created == ["users"]
        async with engine.connect() as conn:
            names = await conn.run_sync(lambda c: inspect(c).get_table_names())
        assert names == ["users"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_sync_refuses_stale_table_without_mutating(tmp_path: Path, tables) -> None:
    db_file = tmp_path / "stale.db"
    _create_stale_users_table(db_file)

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file.as_posix()}")
    try:
        with pytest.raises(SchemaSyncError) as excinfo:
            await synchronize_schema(engine, tables)
        message = str(excinfo.value)
        assert "'users'" in message
        assert "email" in message
        assert "create_schema" in message

        # The failed sync ran in one transaction: nothing was created.
        assert sorted(await missing_tables(engine, tables)) == ["logs", "schema_migrations"]
    finally:
        await engine.dispose()


def test_schema_mismatch_detection_triggers_when_column_missing(tmp_path: Path, tables) -> None:
    db_file = tmp_path / "stale.db"
    _create_stale_users_table(db_file)
    engine = create_engine(f"sqlite:///{db_file.as_posix()}")

    has_mismatch, message = check_schema_mismatch(engine, tables)
    assert has_mismatch is True
    assert "missing column(s)" in message
    engine.dispose()


def test_schema_ok_when_tables_do_not_exist(tables) -> None:
    engine = create_engine("sqlite:///:memory:")
    has_mismatch, message = check_schema_mismatch(engine, tables)
    assert has_mismatch is False
    assert message == ""
