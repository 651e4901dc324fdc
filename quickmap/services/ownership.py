"""Ownership checks for plan tree mutations.

Non-root entities are resolved with one joined query that walks the foreign
key chain up to ``plans`` and filters on the plan owner. A missing entity and
an entity owned by someone else produce the same ``NotFound``.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from quickmap.core.errors import NotFound, PersistenceFailure, store_message
from quickmap.core.logging import get_logger
from quickmap.models.plan import Milestone, Plan, Resource, Step

logger = get_logger(__name__)


async def _fetch_owned(db: AsyncSession, stmt: Select, label: str, entity_id: str, owner_id: str):
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        message = store_message(exc)
        logger.error("Ownership lookup failed", entity=label, error=message)
        raise PersistenceFailure(message) from exc

    entity = result.scalar_one_or_none()
    if entity is None:
        logger.info("Ownership check failed", entity=label, entity_id=entity_id, owner_id=owner_id)
        raise NotFound(f"{label} not found")
    return entity


async def ensure_plan_owner(db: AsyncSession, plan_id: str, owner_id: str) -> Plan:
    """Return the plan if ``owner_id`` owns it."""
    stmt = select(Plan).where(Plan.id == plan_id, Plan.owner_id == owner_id)
    return await _fetch_owned(db, stmt, "Plan", plan_id, owner_id)


async def ensure_milestone_owner(db: AsyncSession, milestone_id: str, owner_id: str) -> Milestone:
    """Return the milestone if its plan belongs to ``owner_id``."""
    stmt = (
        select(Milestone)
        .join(Plan, Plan.id == Milestone.plan_id)
        .where(Milestone.id == milestone_id, Plan.owner_id == owner_id)
    )
    return await _fetch_owned(db, stmt, "Milestone", milestone_id, owner_id)


async def ensure_step_owner(db: AsyncSession, step_id: str, owner_id: str) -> Step:
    """Return the step if step -> milestone -> plan ends at ``owner_id``."""
    stmt = (
        select(Step)
        .join(Milestone, Milestone.id == Step.milestone_id)
        .join(Plan, Plan.id == Milestone.plan_id)
        .where(Step.id == step_id, Plan.owner_id == owner_id)
    )
    return await _fetch_owned(db, stmt, "Step", step_id, owner_id)


async def ensure_resource_owner(db: AsyncSession, resource_id: str, owner_id: str) -> Resource:
    """Return the resource if resource -> step -> milestone -> plan ends at ``owner_id``."""
    stmt = (
        select(Resource)
        .join(Step, Step.id == Resource.step_id)
        .join(Milestone, Milestone.id == Step.milestone_id)
        .join(Plan, Plan.id == Milestone.plan_id)
        .where(Resource.id == resource_id, Plan.owner_id == owner_id)
    )
    return await _fetch_owned(db, stmt, "Resource", resource_id, owner_id)
