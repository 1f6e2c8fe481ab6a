from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Bump when a model change needs an explicit migration.
CURRENT_SCHEMA_VERSION = 1


class SchemaMigration(Base):
    """Schema version applied by the explicit migration command."""

    __tablename__ = "schema_migrations"

    version: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    applied_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
