import logging
import uuid
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.recurrence import should_appear
from app.models.recurring_task import RecurringTask
from app.models.task import Task

logger = logging.getLogger("app.materialize")


def tasks_for_date(db: Session, user_id: uuid.UUID, date_str: str) -> list[Task]:
    return (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.date == date_str)
        .order_by(Task.order.asc(), Task.created_at.asc())
        .all()
    )


def active_rules(db: Session, user_id: uuid.UUID) -> list[RecurringTask]:
    return (
        db.query(RecurringTask)
        .filter(RecurringTask.user_id == user_id, RecurringTask.is_active.is_(True))
        .order_by(RecurringTask.created_at.asc())
        .all()
    )


def _instance_from_rule(rule: RecurringTask, date_str: str, order: int) -> Task:
    return Task(
        user_id=rule.user_id,
        title=rule.title,
        description=rule.description,
        date=date_str,
        start_time=rule.start_time,
        end_time=rule.end_time,
        status="TODO",
        priority=rule.priority,
        pomodoros_total=rule.pomodoros_total,
        pomodoros_completed=0,
        order=order,
        goal_id=rule.goal_id,
        recurring_task_id=rule.id,
    )


def expand_tasks_for_date(db: Session, user_id: uuid.UUID, day: date) -> list[Task]:
    """
    Return every task of `day`, first creating the instances of active
    recurring tasks that match the date and are not there yet.

    A rule counts as already materialized when a task with the same title
    exists for that day. Existing tasks come first in their stored order,
    new ones follow in rule order.
    """
    date_str = day.isoformat()
    existing = tasks_for_date(db, user_id, date_str)

    taken_titles = {t.title for t in existing}
    created: list[Task] = []

    for rule in active_rules(db, user_id):
        if rule.title in taken_titles or not should_appear(rule, day):
            continue
        task = _instance_from_rule(rule, date_str, len(existing) + len(created))
        db.add(task)
        created.append(task)
        taken_titles.add(rule.title)

    if not created:
        return existing

    try:
        db.commit()
    except IntegrityError:
        # another request materialized the same day first
        db.rollback()
        logger.warning(
            "Concurrent materialization user=%s date=%s, re-reading", user_id, date_str
        )
        return tasks_for_date(db, user_id, date_str)

    for task in created:
        db.refresh(task)

    logger.info(
        "Materialized %d recurring task(s) user=%s date=%s",
        len(created),
        user_id,
        date_str,
    )
    return existing + created
