"""Repository layer for DB access only (CRUD + simple queries).

Repositories are pure DB access - no business logic. All repositories accept
AsyncSession explicitly and use the DatabaseManager from core/database.py
(no new engines created).
"""

from .base import BaseRepository
from .log_repo import LogRepository
from .user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "LogRepository",
    "UserRepository",
]
