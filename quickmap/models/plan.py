"""Study plan tree models: plan -> milestones -> steps -> resources."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quickmap.core.database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class Plan(Base):
    """Root of a study roadmap, owned by one identity."""

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    owner_id: Mapped[str] = mapped_column(String, index=True)

    title: Mapped[str] = mapped_column(String)
    focus: Mapped[str] = mapped_column(Text)
    outcome: Mapped[str] = mapped_column(Text)
    estimated_duration_weeks: Mapped[int | None] = mapped_column(Integer, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Milestone(Base):
    """Ordered phase within a plan."""

    __tablename__ = "milestones"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    plan_id: Mapped[str] = mapped_column(ForeignKey("plans.id", ondelete="CASCADE"), index=True)

    title: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    estimated_duration: Mapped[str | None] = mapped_column(String)  # free text, e.g. "2 weeks"
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class Step(Base):
    """Ordered task within a milestone."""

    __tablename__ = "steps"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    milestone_id: Mapped[str] = mapped_column(
        ForeignKey("milestones.id", ondelete="CASCADE"), index=True
    )

    title: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class Resource(Base):
    """Ordered learning reference within a step."""

    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    step_id: Mapped[str] = mapped_column(ForeignKey("steps.id", ondelete="CASCADE"), index=True)

    type: Mapped[str] = mapped_column(String, default="link")  # link, video, book
    title: Mapped[str | None] = mapped_column(String)
    url: Mapped[str | None] = mapped_column(String)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
