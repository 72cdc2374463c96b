import time
from typing import Callable

from app.timer.controller import FocusTimer
from app.timer.state import TimerState


class TimerDriver:
    """
    Calls FocusTimer.tick() on a fixed cadence from one loop, so two ticks
    never overlap. Runs while the timer is active and stops when the interval
    ends, the timer is paused, or stop() is called.
    """

    def __init__(
        self,
        timer: FocusTimer,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        on_tick: Callable[[TimerState], None] | None = None,
    ):
        self.timer = timer
        self.interval = interval
        self._sleep = sleep
        self._on_tick = on_tick
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def run(self) -> TimerState:
        self._stopped = False
        while not self._stopped and self.timer.state.is_active:
            self.timer.tick()
            if self._on_tick is not None:
                self._on_tick(self.timer.state)
            if self.timer.state.is_active and not self._stopped:
                self._sleep(self.interval)
        return self.timer.state
