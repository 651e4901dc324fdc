"""API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.agent.llm import CompletionRequester, get_completion_requester
from quickmap.core.auth import IdentityVerifier, extract_credential, get_identity_verifier
from quickmap.core.database import get_session
from quickmap.core.errors import AuthError
from quickmap.schemas.auth import Identity
from quickmap.services import identity_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


async def get_auth_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
) -> Identity:
    """Verify the caller's credential and record their display identity."""
    credential = extract_credential(request)
    if not credential:
        raise AuthError("No authentication token provided")

    identity = await verifier.verify(credential)
    await identity_service.remember_identity(db, identity)
    return identity


# Database dependency
DBDep = Annotated[AsyncSession, Depends(get_db)]

# Verified caller, passed explicitly to every service call
CurrentUser = Annotated[Identity, Depends(get_auth_user)]

# Completion endpoint
RequesterDep = Annotated[CompletionRequester, Depends(get_completion_requester)]
