"""Services: per-request application logic for the feature modules."""

from .log_service import LogService
from .user_service import DuplicateUserError, UserNotFoundError, UserService

__all__ = [
    "DuplicateUserError",
    "LogService",
    "UserNotFoundError",
    "UserService",
]
