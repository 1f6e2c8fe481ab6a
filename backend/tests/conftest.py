# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import socket
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import pytest

from core import database
from core.config import DatabaseConfig, Settings


@pytest.fixture(autouse=True)
def _fresh_database_singleton(monkeypatch):
    """Every test starts without a global DatabaseManager."""
    monkeypatch.setattr(database, "_db_manager", None)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{(tmp_path / 'app.db').as_posix()}"


@pytest.fixture
def unreachable_sqlite_url(tmp_path: Path) -> str:
    """SQLite file inside a directory that does not exist: opening it fails."""
    return f"sqlite+aiosqlite:///{(tmp_path / 'missing' / 'app.db').as_posix()}"


@pytest.fixture
def make_settings(sqlite_url: str):
    """Factory for Settings on a temporary SQLite file with auto-sync on."""

    def _make(env: str = "dev", **database_overrides) -> Settings:
        options = {"url": sqlite_url, "synchronize": True}
        options.update(database_overrides)
        return Settings(env=env, database=DatabaseConfig(**options))

    return _make


@pytest.fixture
def closed_port() -> int:
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
