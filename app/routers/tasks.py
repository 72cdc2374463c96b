import datetime as dt
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_current_user
from app.core.materialize import expand_tasks_for_date
from app.core.permissions import require_goal_owned, require_task_owned
from app.core.progress import record_completed_pomodoro
from app.db.session import get_db
from app.models.task import FocusSession, Task
from app.models.user import User
from app.schemas.common import CountOut, MessageOut, SuccessOut
from app.schemas.task import (
    FocusSessionIn,
    FocusSessionOut,
    ReorderIn,
    TaskCreate,
    TaskOut,
    TaskStatusIn,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger("app.tasks")


def task_out(t: Task) -> TaskOut:
    return TaskOut(
        id=str(t.id),
        title=t.title,
        description=t.description,
        date=t.date,
        start_time=t.start_time,
        end_time=t.end_time,
        status=t.status,
        priority=t.priority,
        pomodoros_total=t.pomodoros_total,
        pomodoros_completed=t.pomodoros_completed,
        order=t.order,
        goal_id=str(t.goal_id) if t.goal_id else None,
        recurring_task_id=str(t.recurring_task_id) if t.recurring_task_id else None,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title required")
    return title


@router.get("", response_model=list[TaskOut])
def list_tasks(
    date: dt.date = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return [task_out(t) for t in expand_tasks_for_date(db, user.id, date)]


@router.post("", response_model=TaskOut, status_code=201)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    title = _clean_title(payload.title)
    if payload.goal_id:
        require_goal_owned(db, user.id, payload.goal_id)

    date_str = payload.date.isoformat()
    count = (
        db.query(func.count(Task.id))
        .filter(Task.user_id == user.id, Task.date == date_str)
        .scalar()
        or 0
    )

    task = Task(
        user_id=user.id,
        title=title,
        description=payload.description,
        date=date_str,
        start_time=payload.start_time,
        end_time=payload.end_time,
        status="TODO",
        priority=payload.priority,
        pomodoros_total=payload.pomodoros_total,
        goal_id=payload.goal_id,
        order=count,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task_out(task)


@router.patch("/reorder", response_model=SuccessOut)
def reorder_tasks(
    payload: ReorderIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # ids that are not the caller's are skipped silently
    for index, task_id in enumerate(payload.task_ids):
        db.query(Task).filter(Task.id == task_id, Task.user_id == user.id).update(
            {Task.order: index}, synchronize_session=False
        )
    db.commit()
    return SuccessOut(success=True)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return task_out(require_task_owned(db, user.id, task_id))


@router.patch("/{task_id}/progress", response_model=TaskOut)
def record_progress(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = require_task_owned(db, user.id, task_id)
    record_completed_pomodoro(db, task)
    return task_out(task)


@router.patch("/{task_id}/status", response_model=CountOut)
def update_task_status(
    task_id: uuid.UUID,
    payload: TaskStatusIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    count = (
        db.query(Task)
        .filter(Task.id == task_id, Task.user_id == user.id)
        .update({Task.status: payload.status}, synchronize_session=False)
    )
    db.commit()
    return CountOut(count=count)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = require_task_owned(db, user.id, task_id)
    changes = payload.model_dump(exclude_unset=True)

    if "title" in changes:
        if changes["title"] is None:
            raise HTTPException(status_code=400, detail="Title required")
        changes["title"] = _clean_title(changes["title"])
    if changes.get("goal_id"):
        require_goal_owned(db, user.id, changes["goal_id"])
    if "date" in changes:
        if changes["date"] is None:
            raise HTTPException(status_code=400, detail="Date required")
        changes["date"] = changes["date"].isoformat()
    for field in ("pomodoros_total", "priority"):
        if field in changes and changes[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")
    if "pomodoros_total" in changes:
        if changes["pomodoros_total"] < task.pomodoros_completed:
            raise HTTPException(
                status_code=400,
                detail="pomodorosTotal cannot be below pomodorosCompleted",
            )
        if changes["pomodoros_total"] == task.pomodoros_completed:
            changes["status"] = "DONE"

    for field, value in changes.items():
        setattr(task, field, value)

    db.add(task)
    try:
        db.commit()
    except IntegrityError:
        # unique (user, date, title) among recurring instances
        db.rollback()
        raise HTTPException(
            status_code=409,
            detail="A recurring task with this title already exists on that date",
        )
    db.refresh(task)
    return task_out(task)


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = require_task_owned(db, user.id, task_id)
    # focus sessions go with it (cascade)
    db.delete(task)
    db.commit()
    return MessageOut(message="Task deleted")


@router.post(
    "/{task_id}/focus-sessions", response_model=FocusSessionOut, status_code=201
)
def log_focus_session(
    task_id: uuid.UUID,
    payload: FocusSessionIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Store a work interval that ended early. Pomodoro counters are untouched."""
    task = require_task_owned(db, user.id, task_id)
    if payload.end_time < payload.start_time:
        raise HTTPException(status_code=400, detail="endTime must not precede startTime")

    session = FocusSession(
        task_id=task.id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        interruption_reason=(payload.interruption_reason or "").strip() or None,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return FocusSessionOut(
        id=str(session.id),
        task_id=str(session.task_id),
        start_time=session.start_time,
        end_time=session.end_time,
        interruption_reason=session.interruption_reason,
    )
