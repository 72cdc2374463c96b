import uuid

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.goal import Goal
from app.models.recurring_task import RecurringTask
from app.models.task import Task

# Someone else's row is reported exactly like a missing one.


def require_task_owned(db: Session, user_id: uuid.UUID, task_id: uuid.UUID) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def require_goal_owned(db: Session, user_id: uuid.UUID, goal_id: uuid.UUID) -> Goal:
    goal = db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


def require_recurring_task_owned(
    db: Session, user_id: uuid.UUID, recurring_task_id: uuid.UUID
) -> RecurringTask:
    rule = (
        db.query(RecurringTask)
        .filter(
            RecurringTask.id == recurring_task_id, RecurringTask.user_id == user_id
        )
        .first()
    )
    if not rule:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    return rule
