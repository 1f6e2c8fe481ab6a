import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Mapping, Optional, Tuple

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from .errors import ConfigurationError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")
_DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")
_DEV_ENVS = ("dev", "development", "local", "test")


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got {value!r}")


def _env_list(environ: Mapping[str, str], name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def normalize_database_url(url: str) -> str:
    """Rewrite plain PostgreSQL URLs to the asyncpg dialect."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


_SUPPORTED_DRIVERS = ("postgresql+asyncpg", "sqlite+aiosqlite")


def _check_driver(source: str, drivername: str) -> None:
    # Engine connect_args (the connect timeout) are asyncpg-specific.
    if drivername not in _SUPPORTED_DRIVERS:
        raise ConfigurationError(
            f"{source} driver {drivername!r} is not supported; "
            f"use one of {', '.join(_SUPPORTED_DRIVERS)}"
        )


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection parameters for the relational store.

    Immutable once built. When ``url`` is set it replaces the discrete
    host/port/credential fields. ``password`` and ``url`` are kept out of
    ``repr`` so they never reach logs through formatting.
    """

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: Optional[str] = field(default=None, repr=False)
    database: str = "user-management"
    entities: str = "models/*.py"
    synchronize: bool = False
    driver: str = "postgresql+asyncpg"
    url: Optional[str] = field(default=None, repr=False)
    connect_timeout: float = 10.0
    pool_size: int = 5

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url().get_backend_name() == "sqlite"

    def validate(self) -> None:
        """Raise ConfigurationError on missing or malformed parameters."""
        if not self.entities or not self.entities.strip():
            raise ConfigurationError("DB_ENTITIES must be a non-empty glob pattern")
        if self.connect_timeout <= 0:
            raise ConfigurationError("DB_CONNECT_TIMEOUT must be greater than zero")
        if self.pool_size < 1:
            raise ConfigurationError("DB_POOL_SIZE must be at least 1")

        if self.url is not None:
            # Parsing errors may echo the URL, so they are not chained.
            try:
                parsed = make_url(normalize_database_url(self.url))
            except (ArgumentError, ValueError):
                raise ConfigurationError("DATABASE_URL is not a valid database URL") from None
            if parsed.port is not None and not 1 <= parsed.port <= 65535:
                raise ConfigurationError(
                    f"DATABASE_URL port must be between 1 and 65535, got {parsed.port}"
                )
            _check_driver("DATABASE_URL", parsed.drivername)
            return

        _check_driver("DB_DRIVER", self.driver)
        if not self.host or not self.host.strip():
            raise ConfigurationError("DB_HOST must not be empty")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"DB_PORT must be between 1 and 65535, got {self.port}")
        if not self.username or not self.username.strip():
            raise ConfigurationError("DB_USERNAME must not be empty")
        if self.password is None:
            raise ConfigurationError("DB_PASSWORD is required")
        if not self.database or not self.database.strip():
            raise ConfigurationError("DB_NAME must not be empty")

    def sqlalchemy_url(self) -> URL:
        """Return the SQLAlchemy URL for the configured store."""
        if self.url is not None:
            return make_url(normalize_database_url(self.url))
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def safe_url(self) -> str:
        """URL rendered with the password masked, for logs and errors."""
        try:
            return self.sqlalchemy_url().render_as_string(hide_password=True)
        except (ArgumentError, ValueError):
            return "<invalid database url>"

    def secrets(self) -> List[str]:
        """Secret strings that must never appear in log output."""
        values = []
        if self.password:
            values.append(self.password)
        if self.url:
            values.append(self.url)
            try:
                url_password = make_url(normalize_database_url(self.url)).password
            except (ArgumentError, ValueError):
                url_password = None
            if url_password:
                values.append(str(url_password))
        return values


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "User Management"
    env: str = "dev"
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = _DEFAULT_CORS_ORIGINS
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def is_development(self) -> bool:
        return self.env.lower() in _DEV_ENVS

    def validate(self) -> None:
        self.database.validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Create Settings from environment variables.

        Schema auto-sync defaults to on only in development environments.
        """
        if environ is None:
            environ = os.environ
        env = _env_str(environ, "ENV", cls.env)
        is_dev = env.lower() in _DEV_ENVS
        defaults = DatabaseConfig()
        database = DatabaseConfig(
            host=_env_str(environ, "DB_HOST", defaults.host),
            port=_env_int(environ, "DB_PORT", defaults.port),
            username=_env_str(environ, "DB_USERNAME", defaults.username),
            password=environ.get("DB_PASSWORD"),
            database=_env_str(environ, "DB_NAME", defaults.database),
            entities=_env_str(environ, "DB_ENTITIES", defaults.entities),
            synchronize=_env_bool(environ, "DB_SYNCHRONIZE", is_dev),
            driver=_env_str(environ, "DB_DRIVER", defaults.driver),
            url=environ.get("DATABASE_URL") or None,
            connect_timeout=_env_float(environ, "DB_CONNECT_TIMEOUT", defaults.connect_timeout),
            pool_size=_env_int(environ, "DB_POOL_SIZE", defaults.pool_size),
        )
        return cls(
            app_name=_env_str(environ, "APP_NAME", cls.app_name),
            env=env,
            log_level=_env_str(environ, "LOG_LEVEL", cls.log_level),
            cors_origins=_env_list(environ, "CORS_ORIGINS", _DEFAULT_CORS_ORIGINS),
            database=database,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
