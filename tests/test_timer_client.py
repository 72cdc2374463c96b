import json

import httpx

from app.timer.controller import FocusTimer
from app.timer.driver import TimerDriver
from app.timer.reporter import ApiProgressReporter, fetch_task
from app.timer.state import TaskSnapshot, TimerMode, TimerState
from app.timer.storage import TimerStateFile, dump_state, load_state

TASK_JSON = {
    "id": "t-1",
    "title": "Write",
    "status": "TODO",
    "pomodorosTotal": 2,
    "pomodorosCompleted": 1,
}


def mock_client(handler) -> httpx.Client:
    return httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))


def test_state_snapshot_roundtrip():
    state = TimerState(
        mode=TimerMode.SHORT_BREAK,
        is_active=True,
        time_left=120,
        end_time=1_700_000_120.5,
        active_task=TaskSnapshot(id="t-1", title="Write", pomodoros_total=2),
        sessions_completed=3,
    )
    raw = dump_state(state)

    assert json.loads(raw)["mode"] == "SHORT_BREAK"
    assert load_state(raw) == state


def test_state_file_missing_or_corrupt_gives_initial_state(tmp_path):
    store = TimerStateFile(tmp_path / "timer.json")
    assert store.load() == TimerState()

    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() == TimerState()


def test_state_file_save_and_load(tmp_path):
    store = TimerStateFile(tmp_path / "nested" / "timer.json")
    state = TimerState(sessions_completed=2, time_left=42)

    store.save(state)

    assert store.load() == state


def test_fetch_task():
    def handler(request):
        assert request.url.path == "/tasks/t-1"
        return httpx.Response(200, json=TASK_JSON)

    with mock_client(handler) as client:
        snapshot = fetch_task(client, "t-1")

    assert snapshot == TaskSnapshot(
        id="t-1", title="Write", pomodoros_total=2, pomodoros_completed=1, status="TODO"
    )


def test_reporter_patches_progress():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={**TASK_JSON, "pomodorosCompleted": 2, "status": "DONE"})

    with mock_client(handler) as client:
        result = ApiProgressReporter(client).report_completed("t-1")

    assert seen == [("PATCH", "/tasks/t-1/progress")]
    assert result.status == "DONE"


def test_reporter_swallows_http_errors(caplog):
    def handler(request):
        return httpx.Response(500, json={"detail": "Internal Server Error"})

    with mock_client(handler) as client:
        assert ApiProgressReporter(client).report_completed("t-1") is None

    assert "Failed to sync progress" in caplog.text


def test_reporter_swallows_bodies_that_are_not_a_task():
    bodies = iter(
        [
            httpx.Response(200, text="<html>gateway</html>"),
            httpx.Response(200, json={"ok": True}),
        ]
    )

    with mock_client(lambda request: next(bodies)) as client:
        reporter = ApiProgressReporter(client)
        assert reporter.report_completed("t-1") is None
        assert reporter.report_completed("t-1") is None


def test_reporter_swallows_network_errors():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with mock_client(handler) as client:
        assert ApiProgressReporter(client).report_completed("t-1") is None


def test_timer_keeps_going_when_api_is_down():
    now = [1_700_000_000.0]

    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with mock_client(handler) as client:
        timer = FocusTimer(reporter=ApiProgressReporter(client), clock=lambda: now[0])
        timer.set_active_task(TaskSnapshot.from_api(TASK_JSON))
        timer.start()
        now[0] += 1500
        timer.tick()

    assert timer.state.mode == TimerMode.SHORT_BREAK
    assert timer.state.active_task.pomodoros_completed == 2


def test_driver_runs_until_interval_ends():
    now = [1_700_000_000.0]
    sleeps = []
    states = []

    def sleep(seconds):
        sleeps.append(seconds)
        now[0] += 60  # every sleep oversleeps badly

    timer = FocusTimer(clock=lambda: now[0])
    timer.start()
    final = TimerDriver(timer, interval=1.0, sleep=sleep, on_tick=states.append).run()

    assert final.mode == TimerMode.SHORT_BREAK
    assert not final.is_active
    assert len(sleeps) == 25
    assert set(sleeps) == {1.0}
    assert states[-1] == final


def test_driver_does_nothing_when_paused():
    timer = FocusTimer(clock=lambda: 0.0)
    ticks = []

    TimerDriver(timer, sleep=lambda s: None, on_tick=ticks.append).run()

    assert ticks == []


def test_driver_stop():
    now = [0.0]
    timer = FocusTimer(clock=lambda: now[0])
    timer.start()

    def on_tick(state):
        if state.time_left <= 1490:
            driver.stop()

    def sleep(seconds):
        now[0] += seconds

    driver = TimerDriver(timer, sleep=sleep, on_tick=on_tick)
    final = driver.run()

    assert final.is_active
    assert final.time_left == 1490


def test_timer_survives_a_garbled_progress_response():
    now = [1_700_000_000.0]

    with mock_client(lambda request: httpx.Response(200, text="<html>gateway</html>")) as client:
        timer = FocusTimer(reporter=ApiProgressReporter(client), clock=lambda: now[0])
        timer.set_active_task(TaskSnapshot.from_api(TASK_JSON))
        timer.start()
        now[0] += 1500
        timer.tick()

    assert timer.state.mode == TimerMode.SHORT_BREAK
    assert timer.state.active_task.pomodoros_completed == 2


def test_timer_adopts_server_counters_after_a_report():
    now = [1_700_000_000.0]
    # someone else finished a pomodoro on this task in the meantime
    server = {**TASK_JSON, "pomodorosTotal": 4, "pomodorosCompleted": 3}

    with mock_client(lambda request: httpx.Response(200, json=server)) as client:
        timer = FocusTimer(reporter=ApiProgressReporter(client), clock=lambda: now[0])
        timer.set_active_task(TaskSnapshot.from_api({**TASK_JSON, "pomodorosTotal": 4}))
        timer.start()
        now[0] += 1500
        timer.tick()

    assert timer.state.active_task.pomodoros_completed == 3
    assert timer.state.active_task.pomodoros_total == 4
