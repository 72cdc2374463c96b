import datetime as dt
import uuid
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator

from app.core.recurrence import encode_days_of_week
from app.schemas.common import CamelModel, time_of_day
from app.schemas.goal import GoalSummaryOut

Pattern = Literal["DAILY", "WEEKDAYS", "WEEKLY", "CUSTOM"]
# stored as sent, so bounded by the column width
DaysText = Annotated[str, Field(max_length=64)]


def _days_to_wire(value: list[int] | str | None) -> str | None:
    # arrays are encoded here; strings are stored as sent and only checked
    # when a date is expanded
    if isinstance(value, list):
        if not value:
            raise ValueError("daysOfWeek cannot be empty")
        if any(not 0 <= d <= 6 for d in value):
            raise ValueError("weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return encode_days_of_week(value)
    return value


class RecurringTaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    recurrence_pattern: Pattern
    days_of_week: list[int] | DaysText | None = None
    start_time: str | None = time_of_day()
    end_time: str | None = time_of_day()
    priority: int = Field(default=1, ge=1, le=5)
    pomodoros_total: int = Field(default=1, ge=1, le=50)
    goal_id: uuid.UUID | None = None

    @field_validator("days_of_week")
    @classmethod
    def encode_days(cls, v):
        return _days_to_wire(v)

    @model_validator(mode="after")
    def custom_needs_days(self):
        if self.recurrence_pattern == "CUSTOM" and not self.days_of_week:
            raise ValueError("daysOfWeek is required for CUSTOM recurrence")
        return self


class RecurringTaskUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    recurrence_pattern: Pattern | None = None
    days_of_week: list[int] | DaysText | None = None
    start_time: str | None = time_of_day()
    end_time: str | None = time_of_day()
    priority: int | None = Field(default=None, ge=1, le=5)
    pomodoros_total: int | None = Field(default=None, ge=1, le=50)
    goal_id: uuid.UUID | None = None
    is_active: bool | None = None

    @field_validator("days_of_week")
    @classmethod
    def encode_days(cls, v):
        return _days_to_wire(v)


class RecurringTaskOut(CamelModel):
    id: str
    title: str
    description: str | None
    recurrence_pattern: str
    days_of_week: str | None
    start_time: str | None
    end_time: str | None
    priority: int
    pomodoros_total: int
    goal_id: str | None
    goal: GoalSummaryOut | None
    is_active: bool
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
