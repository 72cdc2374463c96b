import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from app.core.pomodoro import POMODORO_SECONDS
from app.models.task import FocusSession, Task

logger = logging.getLogger("app.progress")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def record_completed_pomodoro(
    db: Session, task: Task, now: datetime | None = None
) -> bool:
    """
    Count one finished work interval for `task`.

    The counter is bumped in a single UPDATE guarded by
    pomodoros_completed < pomodoros_total, so it can never pass the total; the
    same statement flips the task to DONE when the last interval lands. A
    closed FocusSession covering the interval is stored only when the counter
    moved. Returns False when the task was already full.
    """
    now = now or _utcnow()

    result = db.execute(
        update(Task)
        .where(
            Task.id == task.id,
            Task.pomodoros_completed < Task.pomodoros_total,
        )
        .values(
            pomodoros_completed=Task.pomodoros_completed + 1,
            status=case(
                (Task.pomodoros_completed + 1 >= Task.pomodoros_total, "DONE"),
                else_=Task.status,
            ),
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        db.rollback()
        logger.info("Pomodoro ignored, task %s already complete", task.id)
        db.refresh(task)
        return False

    db.add(
        FocusSession(
            task_id=task.id,
            start_time=now - timedelta(seconds=POMODORO_SECONDS),
            end_time=now,
        )
    )
    db.commit()
    db.refresh(task)

    logger.info(
        "Pomodoro recorded task=%s %d/%d status=%s",
        task.id,
        task.pomodoros_completed,
        task.pomodoros_total,
        task.status,
    )
    return True
