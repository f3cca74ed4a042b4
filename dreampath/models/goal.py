from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def coerce_date(value: Any) -> Any:
    """Accept plain dates as well as ISO datetimes (the mobile client stores
    ``startDate``/``targetDate`` as full timestamps); time-of-day is dropped."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class RecordModel(BaseModel):
    """Base for stored records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class GoalCategory(str, Enum):
    CAREER = "CAREER"
    FINANCIAL = "FINANCIAL"
    HEALTH = "HEALTH"
    EDUCATION = "EDUCATION"
    PERSONAL = "PERSONAL"
    RELATIONSHIP = "RELATIONSHIP"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Any) -> "GoalCategory":
        """Unknown or missing categories map to OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.OTHER


class GoalStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"
    ARCHIVED = "ARCHIVED"


class GoalPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class GoalMetrics(RecordModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    completion_percentage: float = 0


class Goal(RecordModel):
    id: str
    user_id: str = ""
    title: str = ""
    description: str = ""
    category: GoalCategory = GoalCategory.OTHER
    priority: GoalPriority = GoalPriority.MEDIUM
    status: GoalStatus = GoalStatus.ACTIVE
    start_date: date
    target_date: date
    completed_at: Optional[datetime] = None
    # Snapshot maintained by the app; analytics recomputes from tasks instead
    metrics: GoalMetrics = Field(default_factory=GoalMetrics)
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> GoalCategory:
        return GoalCategory.parse(value)

    @field_validator("start_date", "target_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return coerce_date(value)
