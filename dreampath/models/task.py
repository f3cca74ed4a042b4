from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from dreampath.models.goal import RecordModel, coerce_date


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Task(RecordModel):
    id: str
    goal_id: str
    user_id: str = ""
    title: str = ""
    description: str = ""
    # Display ordering only; analytics ignores it
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    scheduled_date: Optional[date] = None
    # Expected to be set iff status == COMPLETED; not enforced here
    completed_at: Optional[datetime] = None
    estimated_minutes: int = Field(default=30, ge=0)
    actual_minutes: Optional[int] = Field(default=None, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _parse_scheduled_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED and self.completed_at is not None

    @property
    def tracked_minutes(self) -> int:
        """Minutes used for time distribution: actual when recorded, else the estimate."""
        if self.actual_minutes is not None:
            return self.actual_minutes
        return self.estimated_minutes or 0
