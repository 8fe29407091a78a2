"""SQLAlchemy models."""

from src.models.session_token import SessionToken
from src.models.task import Task
from src.models.user import User

__all__ = [
    "User",
    "SessionToken",
    "Task",
]
