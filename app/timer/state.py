from dataclasses import dataclass
from enum import Enum

from app.core.pomodoro import (
    LONG_BREAK_SECONDS,
    POMODORO_SECONDS,
    SHORT_BREAK_SECONDS,
)


class TimerMode(str, Enum):
    POMODORO = "POMODORO"
    SHORT_BREAK = "SHORT_BREAK"
    LONG_BREAK = "LONG_BREAK"


MODE_SECONDS = {
    TimerMode.POMODORO: POMODORO_SECONDS,
    TimerMode.SHORT_BREAK: SHORT_BREAK_SECONDS,
    TimerMode.LONG_BREAK: LONG_BREAK_SECONDS,
}


@dataclass(frozen=True)
class TaskSnapshot:
    """The client's copy of the task being worked on."""

    id: str
    title: str
    pomodoros_total: int
    pomodoros_completed: int = 0
    status: str = "TODO"

    @classmethod
    def from_api(cls, data: dict) -> "TaskSnapshot":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            pomodoros_total=int(data["pomodorosTotal"]),
            pomodoros_completed=int(data.get("pomodorosCompleted", 0)),
            status=data.get("status", "TODO"),
        )


@dataclass(frozen=True)
class TimerState:
    mode: TimerMode = TimerMode.POMODORO
    is_active: bool = False
    # whole seconds left in the current interval
    time_left: int = POMODORO_SECONDS
    # wall-clock deadline (epoch seconds) while running, else None
    end_time: float | None = None
    active_task: TaskSnapshot | None = None
    # finished work intervals since the timer was last reset
    sessions_completed: int = 0
