"""Logs: record and query activity log entries.

Entries that name a user are validated through the user service, so the log
module depends on the user module's provider rather than on its tables.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.activity_log import ActivityLog
from repositories.log_repo import LogRepository
from services.user_service import UserNotFoundError, UserService


class LogService:
    """Log operations on one request-scoped session."""

    def __init__(self, session: AsyncSession, users: UserService) -> None:
        self.session = session
        self.users = users
        self.repo = LogRepository(session)

    async def record(
        self,
        action: str,
        user_id: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> ActivityLog:
        """Persist one entry; raise UserNotFoundError for an unknown user_id."""
        if user_id is not None and not await self.users.exists(user_id):
            raise UserNotFoundError(user_id)
        return await self.repo.add_log(action, user_id=user_id, detail=detail)

    async def list_logs(
        self,
        user_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ActivityLog]:
        return await self.repo.list_recent(user_id=user_id, limit=limit, offset=offset)
