"""Owner edits below the plan: append, update and delete milestones, steps and resources.

Every operation runs the ownership check first. Appends take the next order
index as ``max(order_index) + 1`` among siblings (0 for the first child);
deletes cascade to descendants and leave sibling indices untouched.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from quickmap.core.logging import get_logger
from quickmap.models.plan import Milestone, Resource, Step
from quickmap.schemas.plan import (
    MilestoneCreate,
    MilestoneNode,
    MilestoneUpdate,
    ResourceCreate,
    ResourceNode,
    ResourceUpdate,
    StepCreate,
    StepNode,
    StepUpdate,
)
from quickmap.services.ownership import (
    ensure_milestone_owner,
    ensure_plan_owner,
    ensure_resource_owner,
    ensure_step_owner,
)

logger = get_logger(__name__)


async def next_order_index(
    db: AsyncSession,
    order_column: InstrumentedAttribute,
    parent_column: InstrumentedAttribute,
    parent_id: str,
) -> int:
    """Order index for a new last child of ``parent_id``."""
    # TODO: concurrent appends can read the same max; add a unique
    # (parent, order_index) constraint once duplicates are resolvable
    result = await db.execute(select(func.max(order_column)).where(parent_column == parent_id))
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


def _apply(target: object, changes: dict, required: tuple[str, ...] = ("title",)) -> None:
    """Copy provided fields; required fields are skipped when sent as null."""
    for field, value in changes.items():
        if field in required and value is None:
            continue
        if isinstance(value, str):
            value = value.strip() if field in required else (value.strip() or None)
        setattr(target, field, value)


# ============================================================================
# Milestones
# ============================================================================


async def append_milestone(
    db: AsyncSession,
    plan_id: str,
    *,
    owner_id: str,
    data: MilestoneCreate,
) -> MilestoneNode:
    await ensure_plan_owner(db, plan_id, owner_id)
    order_index = await next_order_index(db, Milestone.order_index, Milestone.plan_id, plan_id)

    milestone = Milestone(
        plan_id=plan_id,
        title=data.title.strip(),
        description=data.description,
        estimated_duration=data.estimated_duration,
        order_index=order_index,
    )
    db.add(milestone)
    await db.flush()

    logger.info(
        "Milestone appended", plan_id=plan_id, milestone_id=milestone.id, order_index=order_index
    )
    return MilestoneNode.model_validate(milestone)


async def update_milestone(
    db: AsyncSession,
    milestone_id: str,
    *,
    owner_id: str,
    data: MilestoneUpdate,
) -> MilestoneNode:
    milestone = await ensure_milestone_owner(db, milestone_id, owner_id)
    _apply(milestone, data.model_dump(exclude_unset=True))
    await db.flush()

    logger.info("Milestone updated", milestone_id=milestone_id)
    return MilestoneNode.model_validate(milestone)


async def delete_milestone(db: AsyncSession, milestone_id: str, *, owner_id: str) -> None:
    await ensure_milestone_owner(db, milestone_id, owner_id)
    await db.execute(delete(Milestone).where(Milestone.id == milestone_id))
    await db.flush()
    logger.info("Milestone deleted", milestone_id=milestone_id)


# ============================================================================
# Steps
# ============================================================================


async def append_step(
    db: AsyncSession,
    milestone_id: str,
    *,
    owner_id: str,
    data: StepCreate,
) -> StepNode:
    await ensure_milestone_owner(db, milestone_id, owner_id)
    order_index = await next_order_index(db, Step.order_index, Step.milestone_id, milestone_id)

    step = Step(
        milestone_id=milestone_id,
        title=data.title.strip(),
        description=data.description,
        order_index=order_index,
    )
    db.add(step)
    await db.flush()

    logger.info(
        "Step appended", milestone_id=milestone_id, step_id=step.id, order_index=order_index
    )
    return StepNode.model_validate(step)


async def update_step(
    db: AsyncSession,
    step_id: str,
    *,
    owner_id: str,
    data: StepUpdate,
) -> StepNode:
    step = await ensure_step_owner(db, step_id, owner_id)
    _apply(step, data.model_dump(exclude_unset=True))
    await db.flush()

    logger.info("Step updated", step_id=step_id)
    return StepNode.model_validate(step)


async def delete_step(db: AsyncSession, step_id: str, *, owner_id: str) -> None:
    await ensure_step_owner(db, step_id, owner_id)
    await db.execute(delete(Step).where(Step.id == step_id))
    await db.flush()
    logger.info("Step deleted", step_id=step_id)


# ============================================================================
# Resources
# ============================================================================


async def append_resource(
    db: AsyncSession,
    step_id: str,
    *,
    owner_id: str,
    data: ResourceCreate,
) -> ResourceNode:
    await ensure_step_owner(db, step_id, owner_id)
    order_index = await next_order_index(db, Resource.order_index, Resource.step_id, step_id)

    resource = Resource(
        step_id=step_id,
        type=data.type,
        title=data.title,
        url=data.url,
        order_index=order_index,
    )
    db.add(resource)
    await db.flush()

    logger.info(
        "Resource appended", step_id=step_id, resource_id=resource.id, order_index=order_index
    )
    return ResourceNode.model_validate(resource)


async def update_resource(
    db: AsyncSession,
    resource_id: str,
    *,
    owner_id: str,
    data: ResourceUpdate,
) -> ResourceNode:
    resource = await ensure_resource_owner(db, resource_id, owner_id)
    _apply(resource, data.model_dump(exclude_unset=True), required=("type",))
    await db.flush()

    logger.info("Resource updated", resource_id=resource_id)
    return ResourceNode.model_validate(resource)


async def delete_resource(db: AsyncSession, resource_id: str, *, owner_id: str) -> None:
    await ensure_resource_owner(db, resource_id, owner_id)
    await db.execute(delete(Resource).where(Resource.id == resource_id))
    await db.flush()
    logger.info("Resource deleted", resource_id=resource_id)
