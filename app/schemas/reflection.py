import datetime as dt

from pydantic import Field

from app.schemas.common import CamelModel


class ReflectionIn(CamelModel):
    week_start_date: dt.date
    went_well: str | None = Field(default=None, max_length=5000)
    to_improve: str | None = Field(default=None, max_length=5000)
    accomplishments: str | None = Field(default=None, max_length=5000)
    challenges: str | None = Field(default=None, max_length=5000)


class ReflectionOut(CamelModel):
    id: str
    week_start_date: str
    went_well: str | None
    to_improve: str | None
    accomplishments: str | None
    challenges: str | None
    created_at: dt.datetime | None
    updated_at: dt.datetime | None


class DayStatsOut(CamelModel):
    completed: int
    total: int


class WeeklyStatsOut(CamelModel):
    daily_stats: dict[str, DayStatsOut]
    total_tasks: int
    completed_tasks: int
    completion_rate: int  # percent
    total_focus_minutes: int
    total_focus_hours: float
    interrupted_sessions: int
    total_sessions: int
