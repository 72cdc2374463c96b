import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid, func, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class RecurringTask(Base):
    """
    Template that materializes a Task on every matching date.
    Deactivate (is_active=false) instead of deleting to keep history readable.
    """

    __tablename__ = "recurring_tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # DAILY | WEEKDAYS | WEEKLY | CUSTOM; kept as plain text so that rows with
    # an unknown pattern still load (they simply never match)
    recurrence_pattern: Mapped[str] = mapped_column(String(16), nullable=False)
    # JSON array of weekday indices, Sunday=0; only read for CUSTOM
    days_of_week: Mapped[str | None] = mapped_column(String(64), nullable=True)

    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    priority: Mapped[int] = mapped_column(nullable=False, server_default="1", default=1)
    pomodoros_total: Mapped[int] = mapped_column(
        nullable=False, server_default="1", default=1
    )

    goal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=true(), default=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    goal: Mapped[Optional["Goal"]] = relationship("Goal")
