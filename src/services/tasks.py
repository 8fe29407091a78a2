"""Task service scoped to a single owner."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from src.database import commit_or_raise
from src.models.task import Task
from src.models.user import User
from src.schemas.task import TaskCreate, TaskUpdate
from src.schemas.validators import validate_partial_update
from src.services.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Public sort keys -> model columns
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "description": Task.description,
    "completed": Task.completed,
}


def parse_sort(sort_by: str) -> tuple[str, str]:
    """Parse ``<field>:<asc|desc>`` into a (field, direction) pair.

    The direction defaults to ``asc`` when omitted.
    """
    field, _, direction = sort_by.partition(":")
    direction = direction or "asc"
    if field not in SORTABLE_FIELDS:
        raise ValidationError(
            f"sortBy: unknown field '{field}'. Use one of {', '.join(SORTABLE_FIELDS)}",
            field="sortBy",
        )
    if direction not in ("asc", "desc"):
        raise ValidationError("sortBy: direction must be 'asc' or 'desc'", field="sortBy")
    return field, direction


def create_task(db: Session, owner: User, data: TaskCreate) -> Task:
    """Create a task owned by ``owner``."""
    task = Task(description=data.description, completed=data.completed, owner_id=owner.id)
    db.add(task)
    commit_or_raise(db)
    db.refresh(task)
    return task


def list_tasks(
    db: Session,
    owner: User,
    completed: bool | None = None,
    limit: int | None = None,
    skip: int = 0,
    sort_by: str | None = None,
) -> list[Task]:
    """List the owner's tasks with optional filtering, sorting and pagination."""
    query = db.query(Task).filter(Task.owner_id == owner.id)

    if completed is not None:
        query = query.filter(Task.completed.is_(completed))

    if sort_by:
        field, direction = parse_sort(sort_by)
        column = SORTABLE_FIELDS[field]
        query = query.order_by(column.desc() if direction == "desc" else column.asc(), Task.id)
    else:
        query = query.order_by(Task.id)

    if skip:
        query = query.offset(skip)
    if limit:
        query = query.limit(limit)

    return query.all()


def get_task(db: Session, owner: User, task_id: int) -> Task:
    """Get one of the owner's tasks.

    Tasks owned by other users are reported as missing.
    """
    task = db.query(Task).filter(Task.id == task_id, Task.owner_id == owner.id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def update_task(db: Session, task: Task, fields: dict[str, Any]) -> Task:
    """Validate and apply a task update as a single commit."""
    updates = validate_partial_update(TaskUpdate, fields)
    for key, value in updates.items():
        setattr(task, key, value)
    commit_or_raise(db)
    db.refresh(task)
    return task


def delete_task(db: Session, task: Task) -> None:
    """Delete a task."""
    task_id = task.id
    db.delete(task)
    commit_or_raise(db)
    logger.info(f"Deleted task {task_id}")
