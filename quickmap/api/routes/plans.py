"""Plan routes for the signed-in owner."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.core.logging import get_logger
from quickmap.schemas.plan import (
    DeletedResponse,
    MilestoneCreate,
    MilestoneResponse,
    PlanListResponse,
    PlanResponse,
    PlanUpdate,
    ProgressResponse,
)
from quickmap.services import plan_service, progress_service, roadmap_edit_service

logger = get_logger(__name__)
router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=PlanListResponse)
async def list_plans(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanListResponse:
    """List the caller's plans, newest first."""
    plans = await plan_service.list_owner_plans(db, user.id)
    return PlanListResponse(plans=plans)


# Fixed paths must come BEFORE parameterized paths ("/latest" vs "/{plan_id}")


@router.get("/latest", response_model=PlanResponse)
async def get_latest_plan(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanResponse:
    """Get the caller's most recent plan; ``plan`` is null when there is none."""
    tree = await plan_service.get_latest_plan_tree(db, user.id)
    if tree is not None:
        tree = await progress_service.annotate_tree(db, tree, user.id)
    return PlanResponse(plan=tree)


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanResponse:
    """Get one of the caller's plans with milestones, steps and resources."""
    tree = await plan_service.get_plan_tree(db, plan_id, owner_id=user.id)
    tree = await progress_service.annotate_tree(db, tree, user.id)
    return PlanResponse(plan=tree)


@router.patch("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanResponse:
    """Edit title, focus, outcome or estimated duration."""
    await plan_service.update_plan(db, plan_id, owner_id=user.id, update_data=data)
    tree = await plan_service.get_plan_tree(db, plan_id, owner_id=user.id)
    return PlanResponse(plan=tree)


@router.delete("/{plan_id}", response_model=DeletedResponse)
async def delete_plan(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> DeletedResponse:
    """Delete a plan and everything below it."""
    await plan_service.delete_plan(db, plan_id, owner_id=user.id)
    return DeletedResponse(id=plan_id)


@router.post(
    "/{plan_id}/milestones",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_milestone(
    plan_id: str,
    data: MilestoneCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> MilestoneResponse:
    """Add a milestone after the plan's last one."""
    milestone = await roadmap_edit_service.append_milestone(
        db, plan_id, owner_id=user.id, data=data
    )
    return MilestoneResponse(milestone=milestone)


@router.get("/{plan_id}/progress", response_model=ProgressResponse)
async def get_plan_progress(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> ProgressResponse:
    """Completed vs. total steps of any plan for the caller."""
    progress = await progress_service.get_plan_progress(db, user_id=user.id, plan_id=plan_id)
    return ProgressResponse(plan_id=plan_id, progress=progress)
