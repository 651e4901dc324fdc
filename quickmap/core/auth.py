"""Authentication utilities.

Credentials are bearer tokens issued by an external identity provider. This
module only verifies them: the token is taken from the auth cookie or the
``Authorization`` header and exchanged for the user record at the provider's
``/auth/v1/user`` endpoint. Sign-up and login happen against the provider
directly.
"""

from functools import lru_cache

import httpx
from fastapi import Request

from quickmap.core.config import get_settings
from quickmap.core.errors import AuthError
from quickmap.core.logging import get_logger
from quickmap.schemas.auth import Identity

logger = get_logger(__name__)


def extract_credential(request: Request) -> str | None:
    """Get the bearer token, cookie first then ``Authorization`` header."""
    settings = get_settings()
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


class IdentityVerifier:
    """Checks bearer tokens against the identity provider."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def verify(self, credential: str) -> Identity:
        """Resolve a credential to an identity.

        Raises:
            AuthError: Token rejected or the provider could not be reached
        """
        headers = {"Authorization": f"Bearer {credential}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Identity provider request failed", error=str(exc))
            raise AuthError("Authentication error") from exc

        if response.status_code != 200:
            logger.info("Credential rejected", status_code=response.status_code)
            raise AuthError("Invalid or expired token")

        try:
            data = response.json()
        except ValueError:
            raise AuthError("Invalid or expired token") from None

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthError("Invalid or expired token")

        return Identity(id=str(user_id), email=data.get("email"))


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """Get the configured identity verifier."""
    settings = get_settings()
    return IdentityVerifier(
        base_url=settings.IDENTITY_URL,
        api_key=settings.IDENTITY_API_KEY,
        timeout=settings.IDENTITY_TIMEOUT_SECONDS,
    )
