"""Bookmark and completion schemas."""

from pydantic import BaseModel


class BookmarkStatusResponse(BaseModel):
    success: bool = True
    plan_id: str
    bookmarked: bool


class StepCompletionResponse(BaseModel):
    success: bool = True
    step_id: str
    completed: bool
