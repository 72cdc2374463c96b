import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_current_user
from app.core.permissions import require_goal_owned
from app.db.session import get_db
from app.models.goal import Goal
from app.models.recurring_task import RecurringTask
from app.models.task import Task
from app.models.user import User
from app.schemas.common import MessageOut
from app.schemas.goal import GoalCreate, GoalOut, GoalSummaryOut, GoalUpdate

router = APIRouter(prefix="/goals", tags=["goals"])

LEVELS = {"YEAR", "QUARTER", "MONTH", "WEEK"}


def _pct(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round(part / whole * 100)


def goal_summary(g: Goal) -> GoalSummaryOut:
    return GoalSummaryOut(id=str(g.id), title=g.title, level=g.level)


def goal_out(g: Goal) -> GoalOut:
    total = len(g.tasks)
    completed = sum(1 for t in g.tasks if t.status == "DONE")
    return GoalOut(
        id=str(g.id),
        title=g.title,
        description=g.description,
        level=g.level,
        parent_goal_id=str(g.parent_goal_id) if g.parent_goal_id else None,
        parent_goal=goal_summary(g.parent_goal) if g.parent_goal else None,
        sub_goals=[goal_summary(s) for s in g.sub_goals],
        total_tasks=total,
        completed_tasks=completed,
        progress=_pct(completed, total),
        created_at=g.created_at,
        updated_at=g.updated_at,
    )


def _check_parent(db: Session, user_id: uuid.UUID, goal_id, parent_id: uuid.UUID):
    if goal_id is not None and parent_id == goal_id:
        raise HTTPException(status_code=400, detail="Goal cannot be its own parent")

    parent = db.query(Goal).filter(Goal.id == parent_id, Goal.user_id == user_id).first()
    if not parent:
        raise HTTPException(status_code=404, detail="Parent goal not found")

    # walk up from the new parent; meeting the goal itself would close a loop
    ancestor = parent
    while goal_id is not None and ancestor.parent_goal_id is not None:
        if ancestor.parent_goal_id == goal_id:
            raise HTTPException(
                status_code=400, detail="Goal cannot be nested under its own sub-goal"
            )
        ancestor = ancestor.parent_goal


@router.get("", response_model=list[GoalOut])
def list_goals(
    level: str | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = (
        db.query(Goal)
        .options(
            selectinload(Goal.tasks),
            selectinload(Goal.sub_goals),
            selectinload(Goal.parent_goal),
        )
        .filter(Goal.user_id == user.id)
    )
    if level:
        level = level.upper()
        if level not in LEVELS:
            raise HTTPException(status_code=400, detail="Invalid level")
        q = q.filter(Goal.level == level)

    return [goal_out(g) for g in q.order_by(Goal.created_at.desc()).all()]


@router.get("/{goal_id}", response_model=GoalOut)
def get_goal(
    goal_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return goal_out(require_goal_owned(db, user.id, goal_id))


@router.post("", response_model=GoalOut, status_code=201)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title required")
    if payload.parent_goal_id:
        _check_parent(db, user.id, None, payload.parent_goal_id)

    goal = Goal(
        user_id=user.id,
        title=title,
        description=payload.description or None,
        level=payload.level,
        parent_goal_id=payload.parent_goal_id,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal_out(goal)


@router.put("/{goal_id}", response_model=GoalOut)
def update_goal(
    goal_id: uuid.UUID,
    payload: GoalUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    goal = require_goal_owned(db, user.id, goal_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("title"):
        goal.title = changes["title"].strip() or goal.title
    if "description" in changes:
        goal.description = changes["description"]
    if changes.get("level"):
        goal.level = changes["level"]
    if "parent_goal_id" in changes:
        parent_id = changes["parent_goal_id"]
        if parent_id is not None:
            _check_parent(db, user.id, goal.id, parent_id)
        goal.parent_goal_id = parent_id

    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal_out(goal)


@router.delete("/{goal_id}", response_model=MessageOut)
def delete_goal(
    goal_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    goal = require_goal_owned(db, user.id, goal_id)

    # linked rows survive, unlinked
    db.query(Task).filter(Task.goal_id == goal.id).update(
        {Task.goal_id: None}, synchronize_session=False
    )
    db.query(RecurringTask).filter(RecurringTask.goal_id == goal.id).update(
        {RecurringTask.goal_id: None}, synchronize_session=False
    )
    db.query(Goal).filter(Goal.parent_goal_id == goal.id).update(
        {Goal.parent_goal_id: None}, synchronize_session=False
    )
    db.expire(goal)
    db.delete(goal)
    db.commit()
    return MessageOut(message="Goal deleted successfully")
