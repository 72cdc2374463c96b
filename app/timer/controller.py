import logging
import math
import time
from dataclasses import replace
from typing import Callable, Protocol

from app.core.pomodoro import POMODOROS_BEFORE_LONG_BREAK
from app.timer.state import MODE_SECONDS, TaskSnapshot, TimerMode, TimerState

logger = logging.getLogger("app.timer")


class ProgressReporter(Protocol):
    def report_completed(self, task_id: str) -> TaskSnapshot | None: ...


class FocusTimer:
    """
    Pomodoro cycle: work, short break, work, ... and a long break after every
    fourth work interval.

    The remaining time is always derived from the absolute deadline, so a
    late, skipped or long-delayed tick() lands on the right value. Finishing a
    work interval is reported once to `reporter`; the local state moves on
    whether or not that report succeeds.
    """

    def __init__(
        self,
        reporter: ProgressReporter | None = None,
        clock: Callable[[], float] = time.time,
        state: TimerState | None = None,
    ):
        self._reporter = reporter
        self._clock = clock
        self._state = state or TimerState()

    @property
    def state(self) -> TimerState:
        return self._state

    def set_active_task(self, task: TaskSnapshot) -> None:
        self._state = replace(
            self._state,
            active_task=task,
            mode=TimerMode.POMODORO,
            time_left=MODE_SECONDS[TimerMode.POMODORO],
            is_active=False,
            end_time=None,
        )

    def start(self) -> None:
        if self._state.is_active:
            return
        self._state = replace(
            self._state,
            is_active=True,
            end_time=self._clock() + self._state.time_left,
        )

    def pause(self) -> None:
        if not self._state.is_active:
            return
        self._state = replace(
            self._state,
            is_active=False,
            time_left=self._remaining(),
            end_time=None,
        )

    def reset(self) -> None:
        self._state = replace(
            self._state,
            time_left=MODE_SECONDS[self._state.mode],
            is_active=False,
            end_time=None,
        )

    def skip(self) -> bool:
        """End a break now. Work intervals cannot be skipped."""
        if self._state.mode == TimerMode.POMODORO:
            return False
        self._state = replace(self._state, time_left=0)
        self._complete()
        return True

    def tick(self) -> None:
        if not self._state.is_active:
            return
        left = self._remaining()
        self._state = replace(self._state, time_left=left)
        if left == 0:
            self._complete()

    def _remaining(self) -> int:
        if self._state.end_time is None:
            return self._state.time_left
        return max(0, math.ceil(self._state.end_time - self._clock()))

    def _complete(self) -> None:
        finished = self._state.mode

        if finished != TimerMode.POMODORO:
            self._enter(TimerMode.POMODORO)
            return

        sessions = self._state.sessions_completed + 1
        task = self._state.active_task
        if task is not None:
            done = min(task.pomodoros_total, task.pomodoros_completed + 1)
            task = replace(
                task,
                pomodoros_completed=done,
                status="DONE" if done >= task.pomodoros_total else task.status,
            )

        self._state = replace(self._state, sessions_completed=sessions, active_task=task)
        if sessions % POMODOROS_BEFORE_LONG_BREAK == 0:
            self._enter(TimerMode.LONG_BREAK)
        else:
            self._enter(TimerMode.SHORT_BREAK)

        logger.info("Work interval %d finished", sessions)
        if task is not None and self._reporter is not None:
            synced = self._reporter.report_completed(task.id)
            # server counters win once they are known
            if synced is not None and synced.id == task.id:
                self._state = replace(self._state, active_task=synced)

    def _enter(self, mode: TimerMode) -> None:
        self._state = replace(
            self._state,
            mode=mode,
            time_left=MODE_SECONDS[mode],
            is_active=False,
            end_time=None,
        )
