from datetime import datetime

from app.core.backfill import backfill_focus_sessions, missing_session_slots
from app.models.task import FocusSession, Task


def test_slots_start_at_nine_and_are_spaced(db, user):
    task = Task(user_id=user.id, title="t", date="2024-06-03", pomodoros_completed=3)

    slots = missing_session_slots(task, existing=1)

    assert [(s.strftime("%H:%M"), e.strftime("%H:%M")) for s, e in slots] == [
        ("09:00", "09:25"),
        ("09:30", "09:55"),
    ]


def test_backfill_only_fills_the_gap(db, user):
    done = Task(user_id=user.id, title="a", date="2024-06-03", pomodoros_total=3, pomodoros_completed=3)
    synced = Task(user_id=user.id, title="b", date="2024-06-03", pomodoros_completed=1)
    fresh = Task(user_id=user.id, title="c", date="2024-06-03")
    db.add_all([done, synced, fresh])
    db.flush()
    start = datetime(2024, 6, 3, 14, 0)
    db.add(FocusSession(task_id=synced.id, start_time=start, end_time=start))
    db.commit()

    assert backfill_focus_sessions(db) == 3
    assert db.query(FocusSession).filter(FocusSession.task_id == done.id).count() == 3
    assert db.query(FocusSession).filter(FocusSession.task_id == synced.id).count() == 1
    assert db.query(FocusSession).filter(FocusSession.task_id == fresh.id).count() == 0

    assert backfill_focus_sessions(db) == 0


def test_backfill_dry_run_writes_nothing(db, user):
    db.add(Task(user_id=user.id, title="a", date="2024-06-03", pomodoros_total=2, pomodoros_completed=2))
    db.commit()

    assert backfill_focus_sessions(db, dry_run=True) == 2
    assert db.query(FocusSession).count() == 0
