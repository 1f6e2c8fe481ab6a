"""SQLAlchemy models for the user management backend.

Entity modules in this package are located at startup by the entity
discovery pattern (``DB_ENTITIES``, default ``models/*.py``).
"""

from .base import Base
from .activity_log import ActivityLog
from .schema_migration import CURRENT_SCHEMA_VERSION, SchemaMigration
from .user import User

__all__ = [
    "Base",
    "ActivityLog",
    "CURRENT_SCHEMA_VERSION",
    "SchemaMigration",
    "User",
]
