"""Bookmark service."""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import NotFound
from quickmap.core.logging import get_logger
from quickmap.models.bookmark import Bookmark
from quickmap.models.plan import Plan
from quickmap.schemas.plan import PlanSummary
from quickmap.services import identity_service, progress_service

logger = get_logger(__name__)


async def _bookmark_exists(db: AsyncSession, user_id: str, plan_id: str) -> bool:
    result = await db.execute(
        select(Bookmark.id).where(Bookmark.user_id == user_id, Bookmark.plan_id == plan_id)
    )
    return result.scalar_one_or_none() is not None


async def add_bookmark(db: AsyncSession, *, user_id: str, plan_id: str) -> None:
    """Bookmark any existing plan. Bookmarking twice is a no-op.

    Concurrent requests for the same pair are settled by the unique
    constraint: the losing insert is rolled back to its savepoint.
    """
    plan = await db.get(Plan, plan_id)
    if plan is None:
        raise NotFound("Plan not found")

    if await _bookmark_exists(db, user_id, plan_id):
        return

    try:
        async with db.begin_nested():
            db.add(Bookmark(user_id=user_id, plan_id=plan_id))
    except IntegrityError:
        logger.info("Bookmark added concurrently", user_id=user_id, plan_id=plan_id)
        return
    logger.info("Bookmark added", user_id=user_id, plan_id=plan_id)


async def remove_bookmark(db: AsyncSession, *, user_id: str, plan_id: str) -> bool:
    """Remove a bookmark. Returns False when there was none."""
    result = await db.execute(
        delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.plan_id == plan_id)
    )
    await db.flush()
    removed = result.rowcount > 0
    if removed:
        logger.info("Bookmark removed", user_id=user_id, plan_id=plan_id)
    return removed


async def list_bookmarked_plans(db: AsyncSession, *, user_id: str) -> list[PlanSummary]:
    """Plans bookmarked by the user, most recent bookmark first.

    Each plan carries its owner's email and the user's own progress.
    """
    result = await db.execute(
        select(Plan)
        .join(Bookmark, Bookmark.plan_id == Plan.id)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc())
    )
    plans = [PlanSummary.model_validate(p) for p in result.scalars().all()]

    plan_ids = [p.id for p in plans]
    emails = await identity_service.get_owner_emails(db, [p.owner_id for p in plans])
    progress = await progress_service.get_progress_for_plans(db, user_id, plan_ids)
    for plan in plans:
        plan.owner_email = emails[plan.owner_id]
        plan.progress = progress.get(plan.id)
    return plans
