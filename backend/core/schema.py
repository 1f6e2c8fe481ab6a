"""
Schema synchronization for discovered entity tables.

Synchronization only ever creates missing tables. An existing table that is
missing mapped columns is a mismatch: it is reported and never altered, so a
stale or foreign schema is not mutated behind the operator's back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence, Tuple

from sqlalchemy import Table, inspect

from models.base import Base

from .errors import SchemaSyncError

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

MIGRATION_HINT = "Run: python create_schema.py (from backend dir) to apply schema changes explicitly."


def check_schema_mismatch(
    bind: "Engine | Connection", tables: Sequence[Table]
) -> Tuple[bool, str]:
    """
    Check whether any existing table is missing columns expected by its model.
    Returns (has_mismatch, message). has_mismatch True means the live schema is stale.
    """
    inspector = inspect(bind)
    problems: List[str] = []
    for table in tables:
        if not inspector.has_table(table.name):
            continue
        expected_columns = set(table.columns.keys())
        current_columns = {c["name"] for c in inspector.get_columns(table.name)}
        missing = expected_columns - current_columns
        if missing:
            problems.append(f"{table.name!r} is missing column(s): {sorted(missing)}")
    if problems:
        return True, "Table " + "; ".join(problems) + ". " + MIGRATION_HINT
    return False, ""


def _missing_table_names(connection: "Connection", tables: Sequence[Table]) -> List[str]:
    inspector = inspect(connection)
    return [table.name for table in tables if not inspector.has_table(table.name)]


def _sync(connection: "Connection", tables: Sequence[Table]) -> List[str]:
    has_mismatch, message = check_schema_mismatch(connection, tables)
    if has_mismatch:
        raise SchemaSyncError(message)
    created = _missing_table_names(connection, tables)
    Base.metadata.create_all(connection, tables=list(tables), checkfirst=True)
    return created


async def synchronize_schema(engine: "AsyncEngine", tables: Sequence[Table]) -> List[str]:
    """Create missing tables; return the names of the tables created.

    Idempotent: against an already synchronized schema nothing is created.
    Raises SchemaSyncError when an existing table is incompatible.
    """
    async with engine.begin() as conn:
        created = await conn.run_sync(_sync, tables)
    if created:
        logger.info("Schema sync created table(s): %s", ", ".join(created))
    else:
        logger.info("Schema sync: %d table(s) already up to date", len(tables))
    return created


async def missing_tables(engine: "AsyncEngine", tables: Sequence[Table]) -> List[str]:
    """Names of mapped tables that do not exist in the live schema."""
    async with engine.connect() as conn:
        return await conn.run_sync(_missing_table_names, tables)
