"""Users: create, read, update and delete user accounts."""

from __future__ import annotations

import logging
from typing import List, NoReturn, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("username", "email", "full_name", "is_active")


class UserNotFoundError(LookupError):
    """Raised when no user has the requested id."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class DuplicateUserError(ValueError):
    """Raised when a username or email is already taken."""


class UserService:
    """User operations on one request-scoped session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = UserRepository(session)

    async def _ensure_unique(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        existing = await self.repo.find_conflict(username=username, email=email, exclude_id=exclude_id)
        if existing is None:
            return
        if username is not None and existing.username == username:
            raise DuplicateUserError(f"Username {username!r} is already taken")
        raise DuplicateUserError(f"Email {email!r} is already registered")

    async def _raise_duplicate(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> NoReturn:
        """Unique constraint hit at flush: a concurrent request took the value first."""
        await self.session.rollback()
        await self._ensure_unique(username, email, exclude_id=exclude_id)
        raise DuplicateUserError("Username or email is already taken")

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        await self._ensure_unique(username, email)
        try:
            user = await self.repo.add_user(username, email, full_name=full_name, is_active=is_active)
        except IntegrityError:
            await self._raise_duplicate(username, email)
        logger.info("Created user id=%s username=%s", user.id, user.username)
        return user

    async def get_user(self, user_id: int) -> User:
        """Return the user or raise UserNotFoundError."""
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def exists(self, user_id: int) -> bool:
        return await self.repo.get_by_id(user_id) is not None

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        return await self.repo.list(limit=limit, offset=offset)

    async def update_user(self, user_id: int, **changes) -> User:
        """Apply the given field changes; unknown fields are ignored."""
        user = await self.get_user(user_id)
        changes = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
        await self._ensure_unique(changes.get("username"), changes.get("email"), exclude_id=user_id)
        for name, value in changes.items():
            setattr(user, name, value)
        try:
            await self.session.flush()
        except IntegrityError:
            await self._raise_duplicate(changes.get("username"), changes.get("email"), exclude_id=user_id)
        logger.info("Updated user id=%s fields=%s", user_id, sorted(changes))
        return user

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        await self.repo.delete(user)
        logger.info("Deleted user id=%s", user_id)
