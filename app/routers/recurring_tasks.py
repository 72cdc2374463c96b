import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from app.core.deps import get_current_user
from app.core.permissions import require_goal_owned, require_recurring_task_owned
from app.db.session import get_db
from app.models.recurring_task import RecurringTask
from app.models.task import Task
from app.models.user import User
from app.routers.goals import goal_summary
from app.schemas.common import MessageOut
from app.schemas.recurring_task import (
    RecurringTaskCreate,
    RecurringTaskOut,
    RecurringTaskUpdate,
)

router = APIRouter(prefix="/recurring-tasks", tags=["recurring-tasks"])
logger = logging.getLogger("app.recurring_tasks")

NOT_NULLABLE = {"title", "recurrence_pattern", "priority", "pomodoros_total", "is_active"}


def recurring_task_out(r: RecurringTask) -> RecurringTaskOut:
    return RecurringTaskOut(
        id=str(r.id),
        title=r.title,
        description=r.description,
        recurrence_pattern=r.recurrence_pattern,
        days_of_week=r.days_of_week,
        start_time=r.start_time,
        end_time=r.end_time,
        priority=r.priority,
        pomodoros_total=r.pomodoros_total,
        goal_id=str(r.goal_id) if r.goal_id else None,
        goal=goal_summary(r.goal) if r.goal else None,
        is_active=r.is_active,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


@router.get("", response_model=list[RecurringTaskOut])
def list_recurring_tasks(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rules = (
        db.query(RecurringTask)
        .options(joinedload(RecurringTask.goal))
        .filter(RecurringTask.user_id == user.id)
        .order_by(RecurringTask.created_at.desc())
        .all()
    )
    return [recurring_task_out(r) for r in rules]


@router.get("/{recurring_task_id}", response_model=RecurringTaskOut)
def get_recurring_task(
    recurring_task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return recurring_task_out(
        require_recurring_task_owned(db, user.id, recurring_task_id)
    )


@router.post("", response_model=RecurringTaskOut, status_code=201)
def create_recurring_task(
    payload: RecurringTaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title required")
    if payload.goal_id:
        require_goal_owned(db, user.id, payload.goal_id)

    rule = RecurringTask(
        user_id=user.id,
        title=title,
        description=payload.description or None,
        recurrence_pattern=payload.recurrence_pattern,
        days_of_week=payload.days_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
        priority=payload.priority,
        pomodoros_total=payload.pomodoros_total,
        goal_id=payload.goal_id,
        is_active=True,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)

    logger.info("Recurring task %s created pattern=%s", rule.id, rule.recurrence_pattern)
    return recurring_task_out(rule)


@router.patch("/{recurring_task_id}", response_model=RecurringTaskOut)
def update_recurring_task(
    recurring_task_id: uuid.UUID,
    payload: RecurringTaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rule = require_recurring_task_owned(db, user.id, recurring_task_id)
    changes = payload.model_dump(exclude_unset=True)

    for field in NOT_NULLABLE & changes.keys():
        if changes[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")
    if "title" in changes:
        changes["title"] = changes["title"].strip()
        if not changes["title"]:
            raise HTTPException(status_code=400, detail="Title required")
    if changes.get("goal_id"):
        require_goal_owned(db, user.id, changes["goal_id"])

    pattern = changes.get("recurrence_pattern", rule.recurrence_pattern)
    days = changes.get("days_of_week", rule.days_of_week)
    if pattern == "CUSTOM" and not days:
        raise HTTPException(
            status_code=400, detail="daysOfWeek is required for CUSTOM recurrence"
        )

    for field, value in changes.items():
        setattr(rule, field, value)

    db.add(rule)
    db.commit()
    db.refresh(rule)
    return recurring_task_out(rule)


@router.delete("/{recurring_task_id}", response_model=MessageOut)
def delete_recurring_task(
    recurring_task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rule = require_recurring_task_owned(db, user.id, recurring_task_id)
    # materialized tasks stay, detached from the rule
    db.query(Task).filter(Task.recurring_task_id == rule.id).update(
        {Task.recurring_task_id: None}, synchronize_session=False
    )
    db.delete(rule)
    db.commit()
    return MessageOut(message="Recurring task deleted successfully")
