"""Service layer modules."""

from quickmap.services import (
    bookmark_service,
    generation_service,
    identity_service,
    ownership,
    plan_service,
    progress_service,
    roadmap_edit_service,
    roadmap_persister,
)

__all__ = [
    "bookmark_service",
    "generation_service",
    "identity_service",
    "ownership",
    "plan_service",
    "progress_service",
    "roadmap_edit_service",
    "roadmap_persister",
]
