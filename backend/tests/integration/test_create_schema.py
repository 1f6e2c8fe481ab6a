"""
Integration test: explicit migration command (create_schema.run) exit codes,
created tables and recorded schema version.
"""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, inspect, text

from core.config import DatabaseConfig, Settings
from create_schema import run
from models.schema_migration import CURRENT_SCHEMA_VERSION


def _sync_engine(sqlite_url: str):
    return create_engine(sqlite_url.replace("sqlite+aiosqlite", "sqlite"))


@pytest.mark.asyncio
async def test_create_schema_creates_tables_and_records_version(make_settings, sqlite_url, capsys) -> None:
    assert await run(make_settings(synchronize=False)) == 0
    assert "schema ok" in capsys.readouterr().out

    engine = _sync_engine(sqlite_url)
    try:
        assert set(inspect(engine).get_table_names()) == {"users", "logs", "schema_migrations"}
        with engine.connect() as conn:
            versions = conn.execute(text("SELECT version FROM schema_migrations")).scalars().all()
        assert versions == [CURRENT_SCHEMA_VERSION]
    finally:
        engine.dispose()


@pytest.mark.asyncio
async def test_create_schema_twice_is_a_no_op(make_settings, sqlite_url) -> None:
    assert await run(make_settings()) == 0
    assert await run(make_settings()) == 0

    engine = _sync_engine(sqlite_url)
    try:
        with engine.connect() as conn:
            count = conn.execute(text("SELECT COUNT(*) FROM schema_migrations")).scalar_one()
        assert count == 1
    finally:
        engine.dispose()


@pytest.mark.asyncio
async def test_create_schema_refuses_stale_table(make_settings, sqlite_url, capsys) -> None:
    engine = _sync_engine(sqlite_url)
    with engine.connect() as conn:
        conn.execute(text("CREATE TABLE logs (id INTEGER PRIMARY KEY, action VARCHAR(64) NOT NULL)"))
        conn.commit()
    engine.dispose()

    assert await run(make_settings()) == 1
    err = capsys.readouterr().err
    assert "Schema mismatch" in err
    assert "'logs'" in err


@pytest.mark.asyncio
async def test_create_schema_unreachable_store_exits_non_zero(make_settings, unreachable_sqlite_url) -> None:
    assert await run(make_settings(url=unreachable_sqlite_url)) == 1


@pytest.mark.asyncio
async def test_create_schema_invalid_configuration_exits_2() -> None:
    assert await run(Settings(database=DatabaseConfig(port=70000, password="pw"))) == 2


@pytest.mark.asyncio
async def test_schema_migration_table_is_always_included(make_settings, sqlite_url) -> None:
    """Even when the entity pattern skips it, the version table is created."""
    assert await run(make_settings(entities="models/{user,activity_log}.py")) == 0
    engine = _sync_engine(sqlite_url)
    try:
        assert "schema_migrations" in inspect(engine).get_table_names()
    finally:
        engine.dispose()
