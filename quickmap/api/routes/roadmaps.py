"""Roadmap generation routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, RequesterDep, get_db
from quickmap.core.logging import get_logger
from quickmap.schemas.roadmap import GenerateRoadmapRequest, GenerateRoadmapResponse
from quickmap.services import generation_service

logger = get_logger(__name__)
router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])


@router.post(
    "/generate",
    response_model=GenerateRoadmapResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_roadmap(
    data: GenerateRoadmapRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
    requester: RequesterDep,
) -> GenerateRoadmapResponse:
    """Generate a study roadmap with the language model and save it as a new plan.

    Two concurrent requests create two independent plans.
    """
    return await generation_service.generate_roadmap(
        db,
        requester,
        owner_id=user.id,
        focus=data.focus,
        outcome=data.outcome,
    )
