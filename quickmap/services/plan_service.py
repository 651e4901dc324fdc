"""Plan service: tree reads, listings and plan-level mutations."""

from collections import defaultdict

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import NotFound, PersistenceFailure, store_message
from quickmap.core.logging import get_logger
from quickmap.models.plan import Milestone, Plan, Resource, Step
from quickmap.schemas.plan import (
    MilestoneNode,
    PlanSummary,
    PlanTree,
    PlanUpdate,
    ResourceNode,
    StepNode,
)
from quickmap.services import identity_service, progress_service
from quickmap.services.ownership import ensure_plan_owner

logger = get_logger(__name__)


# ============================================================================
# Tree Reader
# ============================================================================


async def _load_tree(db: AsyncSession, plan: Plan) -> PlanTree:
    """Fetch the plan's descendants level by level and nest them.

    Each level is one query filtered on the parent ids of the level above,
    ordered by ``order_index``. A level with no parents is not queried.
    """
    milestone_result = await db.execute(
        select(Milestone).where(Milestone.plan_id == plan.id).order_by(Milestone.order_index)
    )
    milestones = list(milestone_result.scalars().all())

    steps: list[Step] = []
    milestone_ids = [m.id for m in milestones]
    if milestone_ids:
        step_result = await db.execute(
            select(Step).where(Step.milestone_id.in_(milestone_ids)).order_by(Step.order_index)
        )
        steps = list(step_result.scalars().all())

    resources: list[Resource] = []
    step_ids = [s.id for s in steps]
    if step_ids:
        resource_result = await db.execute(
            select(Resource).where(Resource.step_id.in_(step_ids)).order_by(Resource.order_index)
        )
        resources = list(resource_result.scalars().all())

    # Group children by parent id; rows arrive sorted so groups stay ordered
    resources_by_step: dict[str, list[ResourceNode]] = defaultdict(list)
    for resource in resources:
        resources_by_step[resource.step_id].append(ResourceNode.model_validate(resource))

    steps_by_milestone: dict[str, list[StepNode]] = defaultdict(list)
    for step in steps:
        steps_by_milestone[step.milestone_id].append(
            StepNode(
                id=step.id,
                title=step.title,
                description=step.description,
                order_index=step.order_index,
                resources=resources_by_step[step.id],
            )
        )

    milestone_nodes = [
        MilestoneNode(
            id=m.id,
            title=m.title,
            description=m.description,
            estimated_duration=m.estimated_duration,
            order_index=m.order_index,
            steps=steps_by_milestone[m.id],
        )
        for m in milestones
    ]

    summary = PlanSummary.model_validate(plan)
    return PlanTree(**summary.model_dump(), milestones=milestone_nodes)


async def get_plan_tree(
    db: AsyncSession,
    plan_id: str,
    *,
    owner_id: str | None = None,
) -> PlanTree:
    """Read a plan with its nested milestones, steps and resources.

    Args:
        db: Database session
        plan_id: Plan ID
        owner_id: When given, plans owned by anyone else read as missing

    Raises:
        NotFound: Plan absent (or not owned by ``owner_id``)
        PersistenceFailure: Store error
    """
    try:
        plan = await db.get(Plan, plan_id)
        if plan is None or (owner_id is not None and plan.owner_id != owner_id):
            raise NotFound("Plan not found")
        return await _load_tree(db, plan)
    except SQLAlchemyError as exc:
        message = store_message(exc)
        logger.error("Plan read failed", plan_id=plan_id, error=message)
        raise PersistenceFailure(message) from exc


async def get_latest_plan_tree(db: AsyncSession, owner_id: str) -> PlanTree | None:
    """Read the owner's most recently created plan, or None if they have none."""
    try:
        result = await db.execute(
            select(Plan)
            .where(Plan.owner_id == owner_id)
            .order_by(Plan.created_at.desc())
            .limit(1)
        )
        plan = result.scalar_one_or_none()
        if plan is None:
            return None
        return await _load_tree(db, plan)
    except SQLAlchemyError as exc:
        message = store_message(exc)
        logger.error("Latest plan read failed", owner_id=owner_id, error=message)
        raise PersistenceFailure(message) from exc


async def get_public_plan_tree(db: AsyncSession, plan_id: str) -> PlanTree:
    """Read any user's plan for public display, with the owner's email.

    The owner lookup never fails the read; it falls back to ``"Unknown"``.
    """
    tree = await get_plan_tree(db, plan_id)
    tree.owner_email = await identity_service.get_owner_email(db, tree.owner_id)
    return tree


# ============================================================================
# Listings
# ============================================================================


async def list_owner_plans(db: AsyncSession, owner_id: str) -> list[PlanSummary]:
    """List the owner's plans, newest first, with the owner's progress."""
    result = await db.execute(
        select(Plan).where(Plan.owner_id == owner_id).order_by(Plan.created_at.desc())
    )
    plans = [PlanSummary.model_validate(p) for p in result.scalars().all()]

    progress = await progress_service.get_progress_for_plans(db, owner_id, [p.id for p in plans])
    for plan in plans:
        plan.progress = progress.get(plan.id)
    return plans


async def list_public_plans(
    db: AsyncSession,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[PlanSummary]:
    """List every user's plans, newest first, with owner emails."""
    result = await db.execute(
        select(Plan).order_by(Plan.created_at.desc()).limit(limit).offset(offset)
    )
    plans = [PlanSummary.model_validate(p) for p in result.scalars().all()]

    emails = await identity_service.get_owner_emails(db, [p.owner_id for p in plans])
    for plan in plans:
        plan.owner_email = emails[plan.owner_id]
    return plans


# ============================================================================
# Plan Mutations
# ============================================================================


async def update_plan(
    db: AsyncSession,
    plan_id: str,
    *,
    owner_id: str,
    update_data: PlanUpdate,
) -> PlanSummary:
    """Apply owner edits to a plan. The owner column is never touched.

    Note: flushes but does NOT commit.
    """
    plan = await ensure_plan_owner(db, plan_id, owner_id)

    changes = update_data.model_dump(exclude_unset=True)
    for field in ("title", "focus", "outcome"):
        if changes.get(field) is not None:
            setattr(plan, field, changes[field].strip())
    if "estimated_duration_weeks" in changes:
        plan.estimated_duration_weeks = changes["estimated_duration_weeks"]

    await db.flush()
    logger.info("Plan updated", plan_id=plan_id, fields=sorted(changes))
    return PlanSummary.model_validate(plan)


async def delete_plan(db: AsyncSession, plan_id: str, *, owner_id: str) -> None:
    """Delete a plan; milestones, steps, resources, bookmarks and completions cascade.

    Note: flushes but does NOT commit.
    """
    await ensure_plan_owner(db, plan_id, owner_id)
    await db.execute(delete(Plan).where(Plan.id == plan_id, Plan.owner_id == owner_id))
    await db.flush()
    logger.info("Plan deleted", plan_id=plan_id, owner_id=owner_id)
