"""Bookmark and progress models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from quickmap.core.database import Base
from quickmap.models.plan import generate_id, utcnow


class Bookmark(Base):
    """A user's saved reference to a plan, usually someone else's."""

    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "plan_id", name="unique_user_plan_bookmark"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(String, index=True)
    plan_id: Mapped[str] = mapped_column(ForeignKey("plans.id", ondelete="CASCADE"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class StepCompletion(Base):
    """Marks a step as done for one user."""

    __tablename__ = "step_completions"
    __table_args__ = (UniqueConstraint("user_id", "step_id", name="unique_user_step_completion"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(String, index=True)
    step_id: Mapped[str] = mapped_column(ForeignKey("steps.id", ondelete="CASCADE"))

    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
