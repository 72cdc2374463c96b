import logging
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.pomodoro import POMODORO_SECONDS, SHORT_BREAK_SECONDS
from app.models.task import FocusSession, Task

logger = logging.getLogger("app.backfill")

DAY_START = time(9, 0)


def missing_session_slots(task: Task, existing: int) -> list[tuple[datetime, datetime]]:
    """
    Closed work intervals to add so that the task has one session per counted
    pomodoro: back to back from 09:00 UTC on the task's day, a short break apart.
    """
    missing = task.pomodoros_completed - existing
    if missing <= 0:
        return []

    day = datetime.strptime(task.date, "%Y-%m-%d").date()
    first = datetime.combine(day, DAY_START, tzinfo=timezone.utc)
    step = timedelta(seconds=POMODORO_SECONDS + SHORT_BREAK_SECONDS)
    length = timedelta(seconds=POMODORO_SECONDS)
    return [(first + i * step, first + i * step + length) for i in range(missing)]


def backfill_focus_sessions(db: Session, dry_run: bool = False) -> int:
    counts = (
        db.query(Task, func.count(FocusSession.id))
        .outerjoin(FocusSession, FocusSession.task_id == Task.id)
        .filter(Task.pomodoros_completed > 0)
        .group_by(Task.id)
        .all()
    )

    created = 0
    for task, existing in counts:
        slots = missing_session_slots(task, existing)
        if not slots:
            continue
        logger.info(
            'Task "%s" (%s): %d pomodoros, %d sessions, adding %d',
            task.title,
            task.id,
            task.pomodoros_completed,
            existing,
            len(slots),
        )
        for start, end in slots:
            db.add(FocusSession(task_id=task.id, start_time=start, end_time=end))
        created += len(slots)

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return created
