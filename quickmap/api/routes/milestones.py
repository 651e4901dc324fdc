"""Milestone routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.schemas.plan import (
    DeletedResponse,
    MilestoneResponse,
    MilestoneUpdate,
    StepCreate,
    StepResponse,
)
from quickmap.services import roadmap_edit_service

router = APIRouter(prefix="/milestones", tags=["milestones"])


@router.patch("/{milestone_id}", response_model=MilestoneResponse)
async def update_milestone(
    milestone_id: str,
    data: MilestoneUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> MilestoneResponse:
    milestone = await roadmap_edit_service.update_milestone(
        db, milestone_id, owner_id=user.id, data=data
    )
    return MilestoneResponse(milestone=milestone)


@router.delete("/{milestone_id}", response_model=DeletedResponse)
async def delete_milestone(
    milestone_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> DeletedResponse:
    """Delete a milestone with its steps and resources; siblings keep their order."""
    await roadmap_edit_service.delete_milestone(db, milestone_id, owner_id=user.id)
    return DeletedResponse(id=milestone_id)


@router.post(
    "/{milestone_id}/steps",
    response_model=StepResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_step(
    milestone_id: str,
    data: StepCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> StepResponse:
    step = await roadmap_edit_service.append_step(db, milestone_id, owner_id=user.id, data=data)
    return StepResponse(step=step)
