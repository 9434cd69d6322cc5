"""Request/response models for the HTTP API."""
from datetime import datetime

from pydantic import BaseModel, Field

from ..tasks.models import Task


class TaskCreate(BaseModel):
    """Request to add a task to a date."""
    title: str
    description: str = ""
    starttime: str = Field("09:00", description="HH:MM")
    endtime: str = Field("10:00", description="HH:MM")


class TaskOut(BaseModel):
    id: str
    title: str
    description: str
    starttime: str
    endtime: str
    createdAt: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskOut":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            starttime=task.starttime,
            endtime=task.endtime,
            createdAt=task.created_at,
        )


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
    code: str
    details: list = Field(default_factory=list)
