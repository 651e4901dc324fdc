"""Step completion tracking and per-plan progress."""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import NotFound
from quickmap.core.logging import get_logger
from quickmap.models.bookmark import StepCompletion
from quickmap.models.plan import Milestone, Plan, Step
from quickmap.schemas.plan import PlanProgress, PlanTree

logger = get_logger(__name__)


def calc_progress(completed: int, total: int) -> PlanProgress:
    """Progress with a rounded percentage; an empty plan is 0%."""
    percent = round(completed / total * 100) if total else 0
    return PlanProgress(completed=completed, total=total, percent=percent)


async def _completion_exists(db: AsyncSession, user_id: str, step_id: str) -> bool:
    result = await db.execute(
        select(StepCompletion.id).where(
            StepCompletion.user_id == user_id,
            StepCompletion.step_id == step_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def set_step_completion(
    db: AsyncSession,
    *,
    user_id: str,
    step_id: str,
    completed: bool,
) -> bool:
    """Mark or unmark a step as done for a user.

    Any existing step can be tracked, including steps of other users' plans
    (bookmarked public plans). Both directions are idempotent, also under
    concurrent requests: a duplicate insert is rolled back to its savepoint.

    Returns:
        The new completion state
    """
    step = await db.get(Step, step_id)
    if step is None:
        raise NotFound("Step not found")

    if completed:
        if not await _completion_exists(db, user_id, step_id):
            try:
                async with db.begin_nested():
                    db.add(StepCompletion(user_id=user_id, step_id=step_id))
            except IntegrityError:
                logger.info("Step completed concurrently", step_id=step_id, user_id=user_id)
    else:
        await db.execute(
            delete(StepCompletion).where(
                StepCompletion.user_id == user_id,
                StepCompletion.step_id == step_id,
            )
        )
        await db.flush()

    logger.info("Step completion set", step_id=step_id, user_id=user_id, completed=completed)
    return completed


async def completed_step_ids(db: AsyncSession, user_id: str, step_ids: list[str]) -> set[str]:
    """Subset of ``step_ids`` the user has completed."""
    if not step_ids:
        return set()
    result = await db.execute(
        select(StepCompletion.step_id).where(
            StepCompletion.user_id == user_id,
            StepCompletion.step_id.in_(step_ids),
        )
    )
    return set(result.scalars().all())


async def get_progress_for_plans(
    db: AsyncSession,
    user_id: str,
    plan_ids: list[str],
) -> dict[str, PlanProgress]:
    """Progress of ``user_id`` for each plan, keyed by plan id."""
    if not plan_ids:
        return {}

    totals_result = await db.execute(
        select(Milestone.plan_id, func.count(Step.id))
        .join(Step, Step.milestone_id == Milestone.id)
        .where(Milestone.plan_id.in_(plan_ids))
        .group_by(Milestone.plan_id)
    )
    totals = dict(totals_result.all())

    completed_result = await db.execute(
        select(Milestone.plan_id, func.count(StepCompletion.id))
        .join(Step, Step.milestone_id == Milestone.id)
        .join(StepCompletion, StepCompletion.step_id == Step.id)
        .where(Milestone.plan_id.in_(plan_ids), StepCompletion.user_id == user_id)
        .group_by(Milestone.plan_id)
    )
    completed = dict(completed_result.all())

    return {
        plan_id: calc_progress(completed.get(plan_id, 0), totals.get(plan_id, 0))
        for plan_id in plan_ids
    }


async def get_plan_progress(db: AsyncSession, *, user_id: str, plan_id: str) -> PlanProgress:
    """Progress of one plan for a user."""
    plan = await db.get(Plan, plan_id)
    if plan is None:
        raise NotFound("Plan not found")
    progress = await get_progress_for_plans(db, user_id, [plan_id])
    return progress[plan_id]


async def annotate_tree(db: AsyncSession, tree: PlanTree, user_id: str) -> PlanTree:
    """Flag the user's completed steps in a plan tree and attach its progress."""
    steps = [step for milestone in tree.milestones for step in milestone.steps]
    done = await completed_step_ids(db, user_id, [step.id for step in steps])
    for step in steps:
        step.completed = step.id in done
    tree.progress = calc_progress(len(done), len(steps))
    return tree
