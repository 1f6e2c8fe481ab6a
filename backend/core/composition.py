"""Composition root: the one place the application graph is assembled.

``build_app_module`` validates configuration and the module graph without any
I/O. ``AppModule.start`` then runs the fallible startup steps in order:
entity discovery, database connection, schema preparation and finally
feature module registration. Startup is all-or-nothing; on failure the
connection pool is disposed and no feature router is mounted.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AsyncIterator, List, Optional, Sequence, Tuple

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routes.api_v1 import API_V1_PREFIX, api_v1_router
from version import get_version

from .config import Settings, get_settings
from .database import DatabaseManager, dispose_database, init_database
from .discovery import discover_entity_modules, entity_tables
from .errors import ConfigurationError, StartupError
from .schema import MIGRATION_HINT, missing_tables, synchronize_schema

if TYPE_CHECKING:
    from sqlalchemy import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureModule:
    """A feature module: its router, the tables it owns and the modules it imports."""

    name: str
    router: APIRouter
    tables: Tuple[str, ...] = ()
    imports: Tuple[str, ...] = ()


@dataclass
class AppModule:
    """Module descriptor produced by the composition root."""

    settings: Settings
    modules: Tuple[FeatureModule, ...]
    registered: List[str] = field(default_factory=list)
    entity_modules: List[str] = field(default_factory=list)
    _started: bool = field(default=False, repr=False)

    def _check_module_tables(self, tables: Sequence["Table"]) -> None:
        discovered = {table.name for table in tables}
        for module in self.modules:
            missing = [name for name in module.tables if name not in discovered]
            if missing:
                raise ConfigurationError(
                    f"Module {module.name!r} owns table(s) {missing} that entity pattern "
                    f"{self.settings.database.entities!r} did not discover"
                )

    async def _prepare_schema(self, manager: DatabaseManager, tables: Sequence["Table"]) -> None:
        config = self.settings.database
        if config.synchronize:
            if not self.settings.is_development:
                logger.warning(
                    "Schema auto-sync is enabled in env=%s; it will create missing tables on a live "
                    "database. Prefer the explicit migration step (python create_schema.py).",
                    self.settings.env,
                )
            await synchronize_schema(manager.engine, tables)
            return

        missing = await missing_tables(manager.engine, tables)
        if missing:
            logger.warning(
                "Schema auto-sync is disabled and table(s) are missing: %s. %s",
                ", ".join(missing),
                MIGRATION_HINT,
            )

    async def start(self, app: FastAPI) -> None:
        """Connect, prepare the schema and mount feature modules. Once per process."""
        if self._started:
            raise RuntimeError("AppModule.start() may only be called once")
        self._started = True

        config = self.settings.database
        try:
            entity_modules = discover_entity_modules(config.entities)
            tables = entity_tables(entity_modules)
            self._check_module_tables(tables)

            manager = await init_database(config)
            await manager.check_connection()
            await self._prepare_schema(manager, tables)
        except Exception:
            await dispose_database()
            raise

        self.entity_modules = entity_modules
        for module in self.modules:
            app.include_router(module.router, prefix=API_V1_PREFIX)
            self.registered.append(module.name)
        logger.info("Application ready: modules=%s", ", ".join(self.registered))

    async def stop(self) -> None:
        await dispose_database()


def build_app_module(
    settings: Settings, modules: Optional[Sequence[FeatureModule]] = None
) -> AppModule:
    """Validate settings and the module graph; no I/O happens here."""
    settings.validate()
    if modules is None:
        from modules import DEFAULT_MODULES

        modules = DEFAULT_MODULES

    names = [module.name for module in modules]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate feature module name(s): {duplicates}")
    for module in modules:
        for dependency in module.imports:
            if dependency not in names:
                raise ConfigurationError(
                    f"Module {module.name!r} imports {dependency!r}, which is not registered"
                )
    return AppModule(settings=settings, modules=tuple(modules))


def create_app(
    settings: Optional[Settings] = None,
    modules: Optional[Sequence[FeatureModule]] = None,
) -> FastAPI:
    """Build the FastAPI application around a freshly composed AppModule."""
    if settings is None:
        settings = get_settings()
    app_module = build_app_module(settings, modules)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app_module.start(app)
        except StartupError as e:
            logger.error("Application startup failed: %s", e)
            raise
        logger.info("Application startup complete")
        yield
        await app_module.stop()
        logger.info("Application shutdown complete")

    app = FastAPI(title=settings.app_name, version=get_version(), lifespan=lifespan)
    app.state.app_module = app_module

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )

    app.include_router(api_v1_router)

    @app.get("/health")
    async def health() -> dict:
        """Readiness: ok once every feature module is registered."""
        ready = len(app_module.registered) == len(app_module.modules)
        return {
            "status": "ok" if ready else "starting",
            "env": settings.env,
            "modules": list(app_module.registered),
        }

    return app
