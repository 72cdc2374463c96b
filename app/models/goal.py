import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

GoalLevel = Enum("YEAR", "QUARTER", "MONTH", "WEEK", name="goal_level")


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    level: Mapped[str] = mapped_column(GoalLevel, nullable=False)

    parent_goal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    parent_goal: Mapped[Optional["Goal"]] = relationship(
        "Goal", remote_side="Goal.id", back_populates="sub_goals"
    )
    sub_goals: Mapped[list["Goal"]] = relationship(
        "Goal", back_populates="parent_goal", order_by="Goal.created_at"
    )
    tasks: Mapped[list["Task"]] = relationship("Task")
