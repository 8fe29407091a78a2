"""Task API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.user import User
from src.schemas.task import TaskCreate, TaskResponse
from src.services import tasks

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a task for the current user."""
    return tasks.create_task(db, current_user, task_data)


@router.get("", response_model=list[TaskResponse])
def get_tasks(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    completed: bool | None = Query(default=None, description="Filter by completion"),
    limit: int | None = Query(default=None, ge=1, le=100),
    skip: int = Query(default=0, ge=0),
    sort_by: str | None = Query(
        default=None, alias="sortBy", description="e.g. createdAt:desc"
    ),
):
    """List the current user's tasks."""
    return tasks.list_tasks(
        db, current_user, completed=completed, limit=limit, skip=skip, sort_by=sort_by
    )


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get one of the current user's tasks."""
    return tasks.get_task(db, current_user, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    fields: Annotated[dict[str, Any], Body()],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a task. Only description and completed may change."""
    task = tasks.get_task(db, current_user, task_id)
    return tasks.update_task(db, task, fields)


@router.delete("/{task_id}", response_model=TaskResponse)
def delete_task(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete one of the current user's tasks."""
    task = tasks.get_task(db, current_user, task_id)
    deleted = TaskResponse.model_validate(task)
    tasks.delete_task(db, task)
    return deleted
