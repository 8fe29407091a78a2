"""Pydantic schemas for API requests and responses."""

from src.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from src.schemas.user import (
    AuthResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "AuthResponse",
    "MessageResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
]
