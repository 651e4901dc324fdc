"""Step routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.schemas.bookmark import StepCompletionResponse
from quickmap.schemas.plan import (
    DeletedResponse,
    ResourceCreate,
    ResourceResponse,
    StepResponse,
    StepUpdate,
)
from quickmap.services import progress_service, roadmap_edit_service

router = APIRouter(prefix="/steps", tags=["steps"])


@router.patch("/{step_id}", response_model=StepResponse)
async def update_step(
    step_id: str,
    data: StepUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> StepResponse:
    step = await roadmap_edit_service.update_step(db, step_id, owner_id=user.id, data=data)
    return StepResponse(step=step)


@router.delete("/{step_id}", response_model=DeletedResponse)
async def delete_step(
    step_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> DeletedResponse:
    await roadmap_edit_service.delete_step(db, step_id, owner_id=user.id)
    return DeletedResponse(id=step_id)


@router.post(
    "/{step_id}/resources",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_resource(
    step_id: str,
    data: ResourceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> ResourceResponse:
    resource = await roadmap_edit_service.append_resource(
        db, step_id, owner_id=user.id, data=data
    )
    return ResourceResponse(resource=resource)


@router.put("/{step_id}/completion", response_model=StepCompletionResponse)
async def complete_step(
    step_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> StepCompletionResponse:
    """Mark a step done for the caller (works on bookmarked public plans too)."""
    completed = await progress_service.set_step_completion(
        db, user_id=user.id, step_id=step_id, completed=True
    )
    return StepCompletionResponse(step_id=step_id, completed=completed)


@router.delete("/{step_id}/completion", response_model=StepCompletionResponse)
async def uncomplete_step(
    step_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> StepCompletionResponse:
    completed = await progress_service.set_step_completion(
        db, user_id=user.id, step_id=step_id, completed=False
    )
    return StepCompletionResponse(step_id=step_id, completed=completed)
