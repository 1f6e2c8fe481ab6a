from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    model = User

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def add_user(
        self,
        username: str,
        email: str,
        full_name: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        """Add a user row (not committed)."""
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            is_active=is_active,
            created_at_utc=datetime.now(timezone.utc),
        )
        return await self.add(user)

    async def find_conflict(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> Optional[User]:
        """Return a user already holding ``username`` or ``email``, if any."""
        conditions = []
        if username is not None:
            conditions.append(User.username == username)
        if email is not None:
            conditions.append(User.email == email)
        if not conditions:
            return None
        stmt = select(User).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()
