from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.log_service import LogService
from services.user_service import UserService

from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


def get_user_service(session: AsyncSession = Depends(get_db_session)) -> UserService:
    """Provider registered by the users module."""
    return UserService(session)


def get_log_service(
    session: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> LogService:
    """Provider registered by the logs module; consumes the users provider."""
    return LogService(session, users)
