from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.activity_log import ActivityLog
from .base import BaseRepository


class LogRepository(BaseRepository[ActivityLog]):
    """Repository for ActivityLog entities."""

    model = ActivityLog

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def add_log(
        self,
        action: str,
        user_id: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> ActivityLog:
        """Add a log entry stamped with the current UTC time."""
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            detail=detail,
            created_at_utc=datetime.now(timezone.utc),
        )
        return await self.add(entry)

    async def list_recent(
        self,
        user_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ActivityLog]:
        """List log entries newest first, optionally for one user."""
        stmt = select(ActivityLog)
        if user_id is not None:
            stmt = stmt.where(ActivityLog.user_id == user_id)
        stmt = (
            stmt.order_by(ActivityLog.created_at_utc.desc(), ActivityLog.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
