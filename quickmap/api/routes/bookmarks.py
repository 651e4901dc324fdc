"""Bookmark routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.schemas.bookmark import BookmarkStatusResponse
from quickmap.schemas.plan import PlanListResponse
from quickmap.services import bookmark_service

router = APIRouter(tags=["bookmarks"])


@router.get("/bookmarks", response_model=PlanListResponse)
async def list_bookmarks(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> PlanListResponse:
    """Bookmarked plans with owner email and the caller's progress."""
    plans = await bookmark_service.list_bookmarked_plans(db, user_id=user.id)
    return PlanListResponse(plans=plans)


@router.put("/plans/{plan_id}/bookmark", response_model=BookmarkStatusResponse)
async def add_bookmark(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> BookmarkStatusResponse:
    await bookmark_service.add_bookmark(db, user_id=user.id, plan_id=plan_id)
    return BookmarkStatusResponse(plan_id=plan_id, bookmarked=True)


@router.delete("/plans/{plan_id}/bookmark", response_model=BookmarkStatusResponse)
async def remove_bookmark(
    plan_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> BookmarkStatusResponse:
    await bookmark_service.remove_bookmark(db, user_id=user.id, plan_id=plan_id)
    return BookmarkStatusResponse(plan_id=plan_id, bookmarked=False)
