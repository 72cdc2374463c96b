from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def import_models() -> None:
    """Register every model on Base.metadata (needed before create_all)."""
    from app.models import goal, recurring_task, reflection, task, user  # noqa: F401
