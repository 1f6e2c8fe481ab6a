"""
Explicit, versioned schema migration step.

Creates missing tables for the discovered entities and records
CURRENT_SCHEMA_VERSION in schema_migrations. Refuses (exit 1) when an
existing table is missing mapped columns; nothing is altered or dropped.

Usage (from backend dir): python create_schema.py
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List

from core.config import Settings, get_settings
from core.database import dispose_database, init_database
from core.discovery import discover_entity_modules, entity_tables
from core.errors import ConfigurationError, SchemaSyncError, StartupError
from core.logging import setup_logging
from core.schema import synchronize_schema
from models.schema_migration import CURRENT_SCHEMA_VERSION, SchemaMigration

logger = logging.getLogger(__name__)


async def apply_schema(settings: Settings) -> List[str]:
    """Create missing tables and record the schema version. Returns created table names."""
    config = settings.database
    tables = entity_tables(discover_entity_modules(config.entities))
    if SchemaMigration.__table__ not in tables:
        tables.append(SchemaMigration.__table__)

    manager = await init_database(config)
    try:
        await manager.check_connection()
        created = await synchronize_schema(manager.engine, tables)
        async with manager.session() as session:
            if await session.get(SchemaMigration, CURRENT_SCHEMA_VERSION) is None:
                session.add(
                    SchemaMigration(
                        version=CURRENT_SCHEMA_VERSION,
                        applied_at_utc=datetime.now(timezone.utc),
                    )
                )
                logger.info("Recorded schema version %s", CURRENT_SCHEMA_VERSION)
    finally:
        await dispose_database()
    return created


async def run(settings: Settings) -> int:
    try:
        settings.validate()
        await apply_schema(settings)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    except SchemaSyncError as e:
        print(f"Schema mismatch: {e}", file=sys.stderr)
        return 1
    except StartupError as e:
        logger.error("Schema migration failed: %s", e)
        return 1
    print("schema ok")
    return 0


async def main() -> int:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(settings)
    return await run(settings)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
