"""Owner display identity: recorded on authentication, looked up for public views."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.core.errors import store_message
from quickmap.core.logging import get_logger
from quickmap.models.plan import utcnow
from quickmap.models.profile import Profile
from quickmap.schemas.auth import Identity

logger = get_logger(__name__)

UNKNOWN_OWNER = "Unknown"


async def _load_profile(db: AsyncSession, profile_id: str) -> Profile | None:
    return await db.get(Profile, profile_id)


async def remember_identity(db: AsyncSession, identity: Identity) -> Profile:
    """Create or refresh the profile row for a verified identity.

    A first login can race with another request for the same identity; the
    insert runs under a savepoint and a duplicate falls back to the row the
    other request wrote.

    Note: flushes but does NOT commit.
    """
    profile = await _load_profile(db, identity.id)
    if profile is None:
        try:
            async with db.begin_nested():
                profile = Profile(id=identity.id, email=identity.email)
                db.add(profile)
            logger.info("Profile created", owner_id=identity.id)
            return profile
        except IntegrityError:
            logger.info("Profile created concurrently", owner_id=identity.id)
            profile = await _load_profile(db, identity.id)
            if profile is None:
                raise

    if identity.email and profile.email != identity.email:
        profile.email = identity.email
    profile.last_seen_at = utcnow()
    await db.flush()
    return profile


async def get_owner_emails(db: AsyncSession, owner_ids: list[str]) -> dict[str, str]:
    """Resolve owner ids to display emails.

    Never raises: unknown owners and lookup failures map to ``"Unknown"``.
    The lookup runs under a savepoint so a failure leaves the surrounding
    transaction usable.
    """
    unique_ids = list(dict.fromkeys(owner_ids))
    emails = {owner_id: UNKNOWN_OWNER for owner_id in unique_ids}
    if not unique_ids:
        return emails

    try:
        async with db.begin_nested():
            result = await db.execute(
                select(Profile.id, Profile.email).where(Profile.id.in_(unique_ids))
            )
            rows = result.all()
    except SQLAlchemyError as exc:
        logger.warning("Owner lookup failed", error=store_message(exc), count=len(unique_ids))
        return emails

    for owner_id, email in rows:
        if email:
            emails[owner_id] = email
    return emails


async def get_owner_email(db: AsyncSession, owner_id: str) -> str:
    """Resolve one owner id to a display email, ``"Unknown"`` on any failure."""
    emails = await get_owner_emails(db, [owner_id])
    return emails[owner_id]
