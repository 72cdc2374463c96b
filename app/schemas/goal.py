import datetime as dt
import uuid
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

Level = Literal["YEAR", "QUARTER", "MONTH", "WEEK"]


class GoalCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    level: Level
    parent_goal_id: uuid.UUID | None = None


class GoalUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    level: Level | None = None
    parent_goal_id: uuid.UUID | None = None  # send null to detach


class GoalSummaryOut(CamelModel):
    id: str
    title: str
    level: str


class GoalOut(CamelModel):
    id: str
    title: str
    description: str | None
    level: str
    parent_goal_id: str | None
    parent_goal: GoalSummaryOut | None
    sub_goals: list[GoalSummaryOut]
    total_tasks: int
    completed_tasks: int
    progress: int  # percent of linked tasks that are DONE
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
