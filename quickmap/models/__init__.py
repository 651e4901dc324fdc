"""Database models."""

from quickmap.models.bookmark import Bookmark, StepCompletion
from quickmap.models.plan import Milestone, Plan, Resource, Step
from quickmap.models.profile import Profile

__all__ = [
    "Plan",
    "Milestone",
    "Step",
    "Resource",
    "Profile",
    "Bookmark",
    "StepCompletion",
]
