"""Auth routes."""

from fastapi import APIRouter

from quickmap.api.deps import CurrentUser
from quickmap.schemas.auth import MeResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=MeResponse)
async def get_me(user: CurrentUser) -> MeResponse:
    """Return the verified caller."""
    return MeResponse(user=user)
