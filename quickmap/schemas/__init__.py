"""Pydantic schemas."""

from quickmap.schemas.auth import Identity, MeResponse
from quickmap.schemas.plan import (
    DeletedResponse,
    MilestoneCreate,
    MilestoneNode,
    MilestoneResponse,
    MilestoneUpdate,
    PlanListResponse,
    PlanProgress,
    PlanResponse,
    PlanSummary,
    PlanTree,
    PlanUpdate,
    ProgressResponse,
    ResourceCreate,
    ResourceNode,
    ResourceResponse,
    ResourceUpdate,
    StepCreate,
    StepNode,
    StepResponse,
    StepUpdate,
)
from quickmap.schemas.roadmap import (
    GenerateRoadmapRequest,
    GenerateRoadmapResponse,
    MilestoneDraft,
    ResourceDraft,
    RoadmapDraft,
    StepDraft,
)

__all__ = [
    "Identity",
    "MeResponse",
    "RoadmapDraft",
    "MilestoneDraft",
    "StepDraft",
    "ResourceDraft",
    "GenerateRoadmapRequest",
    "GenerateRoadmapResponse",
    "PlanTree",
    "PlanSummary",
    "PlanProgress",
    "PlanUpdate",
    "MilestoneNode",
    "MilestoneCreate",
    "MilestoneUpdate",
    "StepNode",
    "StepCreate",
    "StepUpdate",
    "ResourceNode",
    "ResourceCreate",
    "ResourceUpdate",
    "PlanResponse",
    "PlanListResponse",
    "MilestoneResponse",
    "StepResponse",
    "ResourceResponse",
    "ProgressResponse",
    "DeletedResponse",
]
