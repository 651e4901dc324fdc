"""Roadmap persistence: write a parsed roadmap into the four plan tables.

Rows are written top-down (plan, milestones, then per milestone its steps and
per step its resources) and every batch is committed on its own. There is no
transaction spanning the tables: when a batch fails it is rolled back alone,
rows from earlier batches stay in place and the failure is raised with the
plan id so the caller can report (or clean up) the partial plan. Deleting the
plan removes whatever was written, via cascading foreign keys.
"""

import math
from typing import Any, NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import PersistenceFailure, store_message
from quickmap.core.logging import get_logger
from quickmap.models.plan import Milestone, Plan, Resource, Step
from quickmap.schemas.roadmap import MilestoneDraft, RoadmapDraft, StepDraft

logger = get_logger(__name__)

DEFAULT_PLAN_TITLE = "Study Plan"
DEFAULT_RESOURCE_TYPE = "link"


class PersistedPlan(NamedTuple):
    plan_id: str
    title: str


# ============================================================================
# Fallback Resolution
# ============================================================================


def _text(value: str | None) -> str | None:
    """Non-blank text or None."""
    if value is None or not value.strip():
        return None
    return value


def resolve_duration_weeks(value: Any) -> int | None:
    """Coerce the model's duration estimate to whole weeks.

    Numbers and numeric strings are accepted; fractions round up. Anything
    else, including non-positive or non-finite values, resolves to None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = math.ceil(value)
    return value if value > 0 else None


def build_plan_row(draft: RoadmapDraft, *, owner_id: str, focus: Any, outcome: Any) -> Plan:
    return Plan(
        owner_id=owner_id,
        title=_text(draft.plan_title) or DEFAULT_PLAN_TITLE,
        focus=_text(draft.focus) or str(focus),
        outcome=_text(draft.outcome) or str(outcome),
        estimated_duration_weeks=resolve_duration_weeks(draft.estimated_duration_weeks),
    )


def build_milestone_rows(plan_id: str, milestones: list[MilestoneDraft]) -> list[Milestone]:
    return [
        Milestone(
            plan_id=plan_id,
            title=_text(m.title) or f"Milestone {i + 1}",
            description=_text(m.description),
            estimated_duration=_text(m.estimated_duration),
            order_index=i,
        )
        for i, m in enumerate(milestones)
    ]


def build_step_rows(milestone_id: str, steps: list[StepDraft]) -> list[Step]:
    return [
        Step(
            milestone_id=milestone_id,
            title=_text(s.title) or f"Step {i + 1}",
            description=_text(s.description),
            order_index=i,
        )
        for i, s in enumerate(steps)
    ]


def build_resource_rows(step_id: str, step: StepDraft) -> list[Resource]:
    return [
        Resource(
            step_id=step_id,
            type=_text(r.type) or DEFAULT_RESOURCE_TYPE,
            title=_text(r.title),
            url=_text(r.url),
            order_index=i,
        )
        for i, r in enumerate(step.resources)
    ]


# ============================================================================
# Batch Writes
# ============================================================================


async def _insert_batch(
    db: AsyncSession,
    rows: list,
    *,
    table: str,
    plan_id: str | None,
) -> None:
    """Insert and commit one batch; roll back only this batch on failure."""
    if not rows:
        return

    db.add_all(rows)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        message = store_message(exc)
        logger.error(
            "Roadmap batch insert failed",
            table=table,
            plan_id=plan_id,
            rows=len(rows),
            error=message,
        )
        raise PersistenceFailure(message, plan_id=plan_id) from exc


async def persist_roadmap(
    db: AsyncSession,
    draft: RoadmapDraft,
    *,
    owner_id: str,
    focus: Any,
    outcome: Any,
) -> PersistedPlan:
    """Write a roadmap draft as plan, milestones, steps and resources.

    Args:
        db: Database session
        draft: Parsed roadmap
        owner_id: Identity that owns the new plan
        focus: User's focus input, used when the model omitted it
        outcome: User's outcome input, used when the model omitted it

    Returns:
        Generated plan id and effective title

    Raises:
        PersistenceFailure: A batch failed. ``plan_id`` is set when the plan
            row (and possibly some descendants) had already been committed.

    Note: This function commits after every batch.
    """
    plan = build_plan_row(draft, owner_id=owner_id, focus=focus, outcome=outcome)
    await _insert_batch(db, [plan], table="plans", plan_id=None)
    plan_id, title = plan.id, plan.title

    milestones = build_milestone_rows(plan_id, draft.milestones)
    await _insert_batch(db, milestones, table="milestones", plan_id=plan_id)
    milestone_ids = [m.id for m in milestones]

    step_count = resource_count = 0
    for milestone_id, milestone_draft in zip(milestone_ids, draft.milestones):
        steps = build_step_rows(milestone_id, milestone_draft.steps)
        await _insert_batch(db, steps, table="steps", plan_id=plan_id)
        step_count += len(steps)

        for step_id, step_draft in zip([s.id for s in steps], milestone_draft.steps):
            resources = build_resource_rows(step_id, step_draft)
            await _insert_batch(db, resources, table="resources", plan_id=plan_id)
            resource_count += len(resources)

    logger.info(
        "Roadmap persisted",
        plan_id=plan_id,
        owner_id=owner_id,
        milestones=len(milestone_ids),
        steps=step_count,
        resources=resource_count,
    )
    return PersistedPlan(plan_id=plan_id, title=title)
