"""
Unit tests: DatabaseManager connectivity check, session commit/rollback and
credential-free connectivity errors.
"""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import select

import models  # noqa: F401
from core.config import DatabaseConfig
from core.database import DatabaseManager, dispose_database, get_database_manager, init_database
from core.errors import ConnectivityError
from models.base import Base
from models.user import User
from repositories.user_repo import UserRepository


@pytest.mark.asyncio
async def test_check_connection_succeeds_for_reachable_store(sqlite_url: str) -> None:
    manager = DatabaseManager(DatabaseConfig(url=sqlite_url))
    await manager.init()
    try:
        await manager.check_connection()
    finally:
        await manager.dispose()
    assert manager.engine is None


@pytest.mark.asyncio
async def test_check_connection_raises_connectivity_error(unreachable_sqlite_url: str) -> None:
    manager = DatabaseManager(DatabaseConfig(url=unreachable_sqlite_url))
    await manager.init()
    try:
        with pytest.raises(ConnectivityError, match="Could not connect"):
            await manager.check_connection()
    finally:
        await manager.dispose()


@pytest.mark.asyncio
async def test_connectivity_error_never_contains_password(closed_port: int) -> None:
    """Closed PostgreSQL port: error names the masked URL, never the password."""
    config = DatabaseConfig(
        host="127.0.0.1",
        port=closed_port,
        password="s3cret-pw",
        connect_timeout=2,
    )
    manager = DatabaseManager(config)
    await manager.init()
    try:
        with pytest.raises(ConnectivityError) as excinfo:
            await manager.check_connection()
    finally:
        await manager.dispose()
    message = str(excinfo.value)
    assert "s3cret-pw" not in message
    assert "postgres:***@127.0.0.1" in message
    assert excinfo.value.__cause__ is None


def test_network_engine_options_use_pool_settings() -> None:
    manager = DatabaseManager(DatabaseConfig(password="pw", pool_size=3, connect_timeout=4))
    options = manager._engine_options()
    assert options["pool_size"] == 3
    assert options["pool_pre_ping"] is True
    assert options["connect_args"] == {"timeout": 4}


def test_sqlite_engine_options_are_empty(sqlite_url: str) -> None:
    assert DatabaseManager(DatabaseConfig(url=sqlite_url))._engine_options() == {}


@pytest.mark.asyncio
async def test_session_requires_init(sqlite_url: str) -> None:
    manager = DatabaseManager(DatabaseConfig(url=sqlite_url))
    with pytest.raises(RuntimeError, match="not initialized"):
        async with manager.session():
            pass
    with pytest.raises(RuntimeError, match="not initialized"):
        await manager.check_connection()


@pytest.mark.asyncio
async def test_session_commits_on_success_and_rolls_back_on_error(sqlite_url: str) -> None:
    manager = await init_database(DatabaseConfig(url=sqlite_url))
    assert get_database_manager() is manager
    try:
        async with manager.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with manager.session() as session:
            await UserRepository(session).add_user("kept", "kept@example.com")

        with pytest.raises(ValueError):
            async with manager.session() as session:
                await UserRepository(session).add_user("dropped", "dropped@example.com")
                raise ValueError("abort")

        async with manager.session() as session:
            result = await session.execute(select(User.username))
            assert list(result.scalars().all()) == ["kept"]
    finally:
        await dispose_database()

    with pytest.raises(RuntimeError):
        get_database_manager()


@pytest.mark.asyncio
async def test_connect_timeout_becomes_connectivity_error(sqlite_url: str, monkeypatch) -> None:
    """asyncpg signals a connect timeout with asyncio.TimeoutError."""

    class _TimingOutEngine:
        def connect(self):
            raise asyncio.TimeoutError()

    manager = DatabaseManager(DatabaseConfig(url=sqlite_url))
    monkeypatch.setattr(manager, "_engine", _TimingOutEngine())
    with pytest.raises(ConnectivityError, match="TimeoutError") as excinfo:
        await manager.check_connection()
    assert excinfo.value.__cause__ is None
