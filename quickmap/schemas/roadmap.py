"""Roadmap schemas: model output drafts and the generation endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Draft(BaseModel):
    """Loosely-typed node of a generated roadmap.

    Every scalar may be missing; fallbacks are resolved at persistence time.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class ResourceDraft(_Draft):
    type: str | None = None
    title: str | None = None
    url: str | None = None


class StepDraft(_Draft):
    title: str | None = None
    description: str | None = None
    resources: list[ResourceDraft] = Field(default_factory=list)

    @field_validator("resources", mode="before")
    @classmethod
    def null_resources_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class MilestoneDraft(_Draft):
    title: str | None = None
    description: str | None = None
    estimated_duration: str | None = Field(default=None, alias="estimatedDuration")
    steps: list[StepDraft] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def null_steps_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class RoadmapDraft(_Draft):
    """Parsed roadmap as returned by the language model."""

    plan_title: str | None = Field(default=None, alias="planTitle")
    focus: str | None = None
    outcome: str | None = None
    # Untyped: anything that is not a usable number resolves to null
    estimated_duration_weeks: Any = Field(default=None, alias="estimatedDurationWeeks")
    milestones: list[MilestoneDraft] = Field(default_factory=list)

    @field_validator("milestones", mode="before")
    @classmethod
    def null_milestones_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class GenerateRoadmapRequest(BaseModel):
    """Generate a roadmap from the learner's focus and expected outcome."""

    focus: str | None = None
    outcome: str | None = None


class GenerateRoadmapResponse(BaseModel):
    success: bool = True
    plan_id: str
    title: str
    roadmap: dict[str, Any]
