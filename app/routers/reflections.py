import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_current_user
from app.db.session import get_db
from app.models.reflection import Reflection
from app.models.task import Task
from app.models.user import User
from app.schemas.reflection import (
    DayStatsOut,
    ReflectionIn,
    ReflectionOut,
    WeeklyStatsOut,
)

router = APIRouter(prefix="/reflections", tags=["reflections"])

HISTORY_LIMIT = 10


def reflection_out(r: Reflection) -> ReflectionOut:
    return ReflectionOut(
        id=str(r.id),
        week_start_date=r.week_start_date,
        went_well=r.went_well,
        to_improve=r.to_improve,
        accomplishments=r.accomplishments,
        challenges=r.challenges,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _pct(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round(part / whole * 100)


def weekly_stats(tasks: list[Task]) -> WeeklyStatsOut:
    daily: dict[str, DayStatsOut] = {}
    focus_seconds = 0.0
    interrupted = 0
    sessions = 0

    for t in tasks:
        day = daily.setdefault(t.date, DayStatsOut(completed=0, total=0))
        day.total += 1
        if t.status == "DONE":
            day.completed += 1

        for s in t.focus_sessions:
            sessions += 1
            if s.end_time is not None:
                focus_seconds += (s.end_time - s.start_time).total_seconds()
            if s.interruption_reason:
                interrupted += 1

    completed = sum(d.completed for d in daily.values())
    focus_minutes = focus_seconds / 60
    return WeeklyStatsOut(
        daily_stats=daily,
        total_tasks=len(tasks),
        completed_tasks=completed,
        completion_rate=_pct(completed, len(tasks)),
        total_focus_minutes=round(focus_minutes),
        total_focus_hours=round(focus_minutes / 60, 1),
        interrupted_sessions=interrupted,
        total_sessions=sessions,
    )


@router.get("", response_model=ReflectionOut | None)
def get_reflection(
    week_start_date: dt.date = Query(..., alias="weekStartDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    r = (
        db.query(Reflection)
        .filter(
            Reflection.user_id == user.id,
            Reflection.week_start_date == week_start_date.isoformat(),
        )
        .first()
    )
    return reflection_out(r) if r else None


@router.get("/history", response_model=list[ReflectionOut])
def reflection_history(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = (
        db.query(Reflection)
        .filter(Reflection.user_id == user.id)
        .order_by(Reflection.week_start_date.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )
    return [reflection_out(r) for r in rows]


@router.get("/stats", response_model=WeeklyStatsOut)
def get_weekly_stats(
    start_date: dt.date = Query(..., alias="startDate"),
    end_date: dt.date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="endDate must not precede startDate")

    tasks = (
        db.query(Task)
        .options(selectinload(Task.focus_sessions))
        .filter(
            Task.user_id == user.id,
            Task.date >= start_date.isoformat(),
            Task.date <= end_date.isoformat(),
        )
        .order_by(Task.date.asc(), Task.order.asc())
        .all()
    )
    return weekly_stats(tasks)


@router.post("", response_model=ReflectionOut)
def save_reflection(
    payload: ReflectionIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    week = payload.week_start_date.isoformat()
    r = (
        db.query(Reflection)
        .filter(Reflection.user_id == user.id, Reflection.week_start_date == week)
        .first()
    )
    if not r:
        r = Reflection(user_id=user.id, week_start_date=week)

    r.went_well = payload.went_well
    r.to_improve = payload.to_improve
    r.accomplishments = payload.accomplishments
    r.challenges = payload.challenges

    db.add(r)
    db.commit()
    db.refresh(r)
    return reflection_out(r)
