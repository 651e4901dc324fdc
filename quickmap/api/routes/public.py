"""Public plan browsing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.schemas.plan import PlanListResponse, PlanResponse
from quickmap.services import plan_service, progress_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/plans", response_model=PlanListResponse)
async def list_public_plans(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> PlanListResponse:
    """List all users' plans, newest first."""
    plans = await plan_service.list_public_plans(db, limit=limit, offset=offset)
    return PlanListResponse(plans=plans)


@router.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_public_plan(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanResponse:
    """Read any plan with its owner's email and the caller's progress."""
    tree = await plan_service.get_public_plan_tree(db, plan_id)
    tree = await progress_service.annotate_tree(db, tree, user.id)
    return PlanResponse(plan=tree)
