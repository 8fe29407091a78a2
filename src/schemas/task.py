"""Task schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    """Create a new task."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=2000)
    completed: bool = False


class TaskUpdate(BaseModel):
    """Update a task. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    description: str | None = Field(None, min_length=1, max_length=2000)
    completed: bool | None = None


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    completed: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime
