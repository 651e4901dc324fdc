"""Authentication schemas."""

from pydantic import BaseModel


class Identity(BaseModel):
    """Verified caller as reported by the identity provider."""

    id: str
    email: str | None = None


class MeResponse(BaseModel):
    success: bool = True
    user: Identity
