"""Plan tree schemas for API requests and responses."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

ResourceType = Literal["link", "video", "book"]

# Trimmed before the length check, so whitespace-only input is rejected
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ResourceNode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    title: str | None
    url: str | None
    order_index: int


class StepNode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    order_index: int
    completed: bool = False
    resources: list[ResourceNode] = []


class MilestoneNode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    estimated_duration: str | None
    order_index: int
    steps: list[StepNode] = []


class PlanProgress(BaseModel):
    """Completed steps of a plan for one user."""

    completed: int
    total: int
    percent: int


class PlanSummary(BaseModel):
    """Plan row without its milestones."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    focus: str
    outcome: str
    estimated_duration_weeks: int | None
    created_at: datetime
    owner_email: str | None = None
    progress: PlanProgress | None = None


class PlanTree(PlanSummary):
    """Plan with its nested milestones, steps and resources."""

    milestones: list[MilestoneNode] = []


class PlanUpdate(BaseModel):
    """Owner edits; fields left out are unchanged."""

    title: RequiredText | None = None
    focus: RequiredText | None = None
    outcome: RequiredText | None = None
    estimated_duration_weeks: int | None = Field(default=None, ge=1)


class MilestoneCreate(BaseModel):
    title: RequiredText
    description: str | None = None
    estimated_duration: str | None = None


class MilestoneUpdate(BaseModel):
    title: RequiredText | None = None
    description: str | None = None
    estimated_duration: str | None = None


class StepCreate(BaseModel):
    title: RequiredText
    description: str | None = None


class StepUpdate(BaseModel):
    title: RequiredText | None = None
    description: str | None = None


class ResourceCreate(BaseModel):
    type: ResourceType = "link"
    title: str | None = None
    url: str | None = None


class ResourceUpdate(BaseModel):
    type: ResourceType | None = None
    title: str | None = None
    url: str | None = None


class PlanResponse(BaseModel):
    success: bool = True
    plan: PlanTree | None


class PlanListResponse(BaseModel):
    success: bool = True
    plans: list[PlanSummary]


class MilestoneResponse(BaseModel):
    success: bool = True
    milestone: MilestoneNode


class StepResponse(BaseModel):
    success: bool = True
    step: StepNode


class ResourceResponse(BaseModel):
    success: bool = True
    resource: ResourceNode


class ProgressResponse(BaseModel):
    success: bool = True
    plan_id: str
    progress: PlanProgress


class DeletedResponse(BaseModel):
    success: bool = True
    id: str
