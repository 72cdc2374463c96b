import datetime as dt
import uuid
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel, time_of_day


class TaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    date: dt.date
    pomodoros_total: int = Field(default=1, ge=1, le=50)
    start_time: str | None = time_of_day()
    end_time: str | None = time_of_day()
    description: str | None = Field(default=None, max_length=2000)
    priority: int = Field(default=1, ge=1, le=5)
    goal_id: uuid.UUID | None = None


class TaskUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    pomodoros_total: int | None = Field(default=None, ge=1, le=50)
    start_time: str | None = time_of_day()
    end_time: str | None = time_of_day()
    date: dt.date | None = None
    priority: int | None = Field(default=None, ge=1, le=5)
    goal_id: uuid.UUID | None = None


class TaskStatusIn(CamelModel):
    status: Literal["TODO", "DONE"]


class ReorderIn(CamelModel):
    task_ids: list[uuid.UUID]


class TaskOut(CamelModel):
    id: str
    title: str
    description: str | None
    date: str
    start_time: str | None
    end_time: str | None
    status: str
    priority: int
    pomodoros_total: int
    pomodoros_completed: int
    order: int
    goal_id: str | None
    recurring_task_id: str | None
    created_at: dt.datetime | None
    updated_at: dt.datetime | None


class FocusSessionIn(CamelModel):
    start_time: dt.datetime
    end_time: dt.datetime
    interruption_reason: str | None = Field(default=None, max_length=240)


class FocusSessionOut(CamelModel):
    id: str
    task_id: str
    start_time: dt.datetime
    end_time: dt.datetime | None
    interruption_reason: str | None
