"""Resource routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.api.deps import CurrentUser, get_db
from quickmap.schemas.plan import DeletedResponse, ResourceResponse, ResourceUpdate
from quickmap.services import roadmap_edit_service

router = APIRouter(prefix="/resources", tags=["resources"])


@router.patch("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    resource_id: str,
    data: ResourceUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> ResourceResponse:
    resource = await roadmap_edit_service.update_resource(
        db, resource_id, owner_id=user.id, data=data
    )
    return ResourceResponse(resource=resource)


@router.delete("/{resource_id}", response_model=DeletedResponse)
async def delete_resource(
    resource_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: CurrentUser,
) -> DeletedResponse:
    await roadmap_edit_service.delete_resource(db, resource_id, owner_id=user.id)
    return DeletedResponse(id=resource_id)
