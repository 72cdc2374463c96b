import uuid
from datetime import datetime
from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

TaskStatus = Enum("TODO", "DONE", name="task_status")


class Task(Base):
    """
    A concrete, dated unit of work.
    Either created ad hoc or materialized from a RecurringTask for one date.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_date", "user_id", "date"),
        # one materialized instance per rule title and day
        Index(
            "uq_tasks_recurring_user_date_title",
            "user_id",
            "date",
            "title",
            unique=True,
            postgresql_where=text("recurring_task_id IS NOT NULL"),
            sqlite_where=text("recurring_task_id IS NOT NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # YYYY-MM-DD, compared lexically for ranges
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    status: Mapped[str] = mapped_column(
        TaskStatus, nullable=False, server_default="TODO", default="TODO"
    )
    priority: Mapped[int] = mapped_column(nullable=False, server_default="1", default=1)

    pomodoros_total: Mapped[int] = mapped_column(
        nullable=False, server_default="1", default=1
    )
    pomodoros_completed: Mapped[int] = mapped_column(
        nullable=False, server_default="0", default=0
    )

    order: Mapped[int] = mapped_column(nullable=False, server_default="0", default=0)

    goal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True
    )
    recurring_task_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("recurring_tasks.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    focus_sessions: Mapped[list["FocusSession"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FocusSession.start_time",
    )


class FocusSession(Base):
    """
    One work interval spent on a task.
    Closed sessions (end_time set) are never modified.
    """

    __tablename__ = "focus_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), index=True
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    interruption_reason: Mapped[str | None] = mapped_column(
        String(240), nullable=True
    )

    task: Mapped["Task"] = relationship(back_populates="focus_sessions")
