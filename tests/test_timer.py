"""FocusTimer state machine, driven by a fake wall clock."""

import pytest

from app.timer.controller import FocusTimer
from app.timer.state import TaskSnapshot, TimerMode, TimerState


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingReporter:
    def __init__(self):
        self.reported: list[str] = []

    def report_completed(self, task_id: str):
        self.reported.append(task_id)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def reporter():
    return RecordingReporter()


@pytest.fixture()
def timer(clock, reporter):
    return FocusTimer(reporter=reporter, clock=clock)


def task(total=4, completed=0, status="TODO"):
    return TaskSnapshot(
        id="t-1", title="Write", pomodoros_total=total, pomodoros_completed=completed, status=status
    )


def run_out(timer, clock):
    """Start the current interval and let it elapse."""
    timer.start()
    clock.advance(timer.state.time_left)
    timer.tick()


def test_initial_state(timer):
    assert timer.state == TimerState(
        mode=TimerMode.POMODORO,
        is_active=False,
        time_left=1500,
        end_time=None,
        active_task=None,
        sessions_completed=0,
    )


def test_start_sets_deadline_and_is_idempotent(timer, clock):
    timer.start()
    assert timer.state.is_active
    assert timer.state.end_time == clock.now + 1500

    clock.advance(10)
    timer.start()
    assert timer.state.end_time == clock.now - 10 + 1500


def test_tick_counts_down_from_deadline(timer, clock):
    timer.start()
    clock.advance(1)
    timer.tick()
    assert timer.state.time_left == 1499

    clock.advance(0.4)
    timer.tick()
    assert timer.state.time_left == 1499  # ceil of 1498.6


def test_tick_while_inactive_does_nothing(timer, clock):
    clock.advance(100)
    timer.tick()
    assert timer.state.time_left == 1500


def test_drift_resilience(timer, clock):
    timer.start()
    timer.tick()
    # client suspended for 10 minutes, then a single tick arrives
    clock.advance(600)
    timer.tick()
    assert timer.state.time_left == 900
    assert timer.state.is_active


def test_pause_keeps_remaining_and_resume_continues(timer, clock):
    timer.start()
    clock.advance(100)
    timer.pause()

    assert not timer.state.is_active
    assert timer.state.end_time is None
    assert timer.state.time_left == 1400

    clock.advance(3600)  # paused time does not count
    timer.start()
    clock.advance(50)
    timer.tick()
    assert timer.state.time_left == 1350


def test_pause_when_inactive_is_a_no_op(timer):
    before = timer.state
    timer.pause()
    assert timer.state == before


def test_reset_restores_mode_duration(timer, clock):
    run_out(timer, clock)
    assert timer.state.mode == TimerMode.SHORT_BREAK
    timer.start()
    clock.advance(120)
    timer.tick()

    timer.reset()

    assert timer.state.mode == TimerMode.SHORT_BREAK
    assert timer.state.time_left == 300
    assert not timer.state.is_active
    assert timer.state.end_time is None


def test_four_work_intervals_end_in_long_break(timer, clock):
    modes = [timer.state.mode]
    for _ in range(4):
        run_out(timer, clock)  # work
        modes.append(timer.state.mode)
        if timer.state.sessions_completed < 4:
            run_out(timer, clock)  # break
            modes.append(timer.state.mode)

    assert modes == [
        TimerMode.POMODORO,
        TimerMode.SHORT_BREAK,
        TimerMode.POMODORO,
        TimerMode.SHORT_BREAK,
        TimerMode.POMODORO,
        TimerMode.SHORT_BREAK,
        TimerMode.POMODORO,
        TimerMode.LONG_BREAK,
    ]
    assert timer.state.sessions_completed == 4
    assert timer.state.time_left == 900


def test_completion_stops_the_timer(timer, clock):
    run_out(timer, clock)
    assert not timer.state.is_active
    assert timer.state.end_time is None
    assert timer.state.time_left == 300


def test_work_completion_reports_bound_task(timer, clock, reporter):
    timer.set_active_task(task(total=2))

    run_out(timer, clock)

    assert reporter.reported == ["t-1"]
    assert timer.state.active_task.pomodoros_completed == 1
    assert timer.state.active_task.status == "TODO"


def test_last_pomodoro_marks_snapshot_done(timer, clock, reporter):
    timer.set_active_task(task(total=1))

    run_out(timer, clock)

    assert timer.state.active_task.pomodoros_completed == 1
    assert timer.state.active_task.status == "DONE"


def test_local_counter_never_exceeds_total(timer, clock):
    timer.set_active_task(task(total=1, completed=1, status="DONE"))

    run_out(timer, clock)

    assert timer.state.active_task.pomodoros_completed == 1


def test_break_completion_does_not_report(timer, clock, reporter):
    timer.set_active_task(task())
    run_out(timer, clock)
    run_out(timer, clock)

    assert timer.state.mode == TimerMode.POMODORO
    assert reporter.reported == ["t-1"]


def test_no_task_no_report(timer, clock, reporter):
    run_out(timer, clock)
    assert timer.state.sessions_completed == 1
    assert reporter.reported == []


def test_skip_is_refused_during_work(timer, clock):
    timer.start()
    clock.advance(30)
    before = timer.state

    assert timer.skip() is False
    assert timer.state == before


def test_skip_ends_a_break(timer, clock, reporter):
    timer.set_active_task(task())
    run_out(timer, clock)
    timer.start()
    clock.advance(10)

    assert timer.skip() is True
    assert timer.state.mode == TimerMode.POMODORO
    assert timer.state.time_left == 1500
    assert not timer.state.is_active
    assert timer.state.sessions_completed == 1
    assert reporter.reported == ["t-1"]


def test_skip_long_break(timer, clock):
    for _ in range(3):
        run_out(timer, clock)
        run_out(timer, clock)
    run_out(timer, clock)
    assert timer.state.mode == TimerMode.LONG_BREAK

    timer.skip()

    assert timer.state.mode == TimerMode.POMODORO
    assert timer.state.sessions_completed == 4


def test_set_active_task_resets_to_work(timer, clock):
    run_out(timer, clock)
    timer.start()

    timer.set_active_task(task())

    assert timer.state.mode == TimerMode.POMODORO
    assert timer.state.time_left == 1500
    assert not timer.state.is_active
    assert timer.state.end_time is None
    assert timer.state.active_task.id == "t-1"
    assert timer.state.sessions_completed == 1


def test_failed_report_keeps_local_transition(clock):
    class Failing:
        def report_completed(self, task_id):
            return None  # reporters swallow their own errors

    timer = FocusTimer(reporter=Failing(), clock=clock)
    timer.set_active_task(task())
    run_out(timer, clock)

    assert timer.state.mode == TimerMode.SHORT_BREAK
    assert timer.state.active_task.pomodoros_completed == 1


def test_restored_running_state_catches_up(clock):
    state = TimerState(is_active=True, time_left=1500, end_time=clock.now + 100)
    timer = FocusTimer(clock=clock, state=state)

    clock.advance(40)
    timer.tick()

    assert timer.state.time_left == 60
