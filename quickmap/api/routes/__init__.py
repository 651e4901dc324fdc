"""API routes."""

from quickmap.api.routes import (
    auth,
    bookmarks,
    milestones,
    plans,
    public,
    resources,
    roadmaps,
    steps,
)

__all__ = [
    "auth",
    "roadmaps",
    "plans",
    "bookmarks",
    "milestones",
    "steps",
    "resources",
    "public",
]
