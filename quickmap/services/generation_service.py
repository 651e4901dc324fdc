"""Roadmap generation: prompt the model, parse its answer, persist the tree."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from quickmap.agent.llm import CompletionRequester
from quickmap.agent.planner import PLANNER_SYSTEM_PROMPT, build_user_prompt
from quickmap.agent.roadmap_parser import parse_roadmap_response
from quickmap.core.errors import ValidationError
from quickmap.core.logging import get_logger
from quickmap.schemas.roadmap import GenerateRoadmapResponse
from quickmap.services.roadmap_persister import persist_roadmap

logger = get_logger(__name__)


def _required_text(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


async def generate_roadmap(
    db: AsyncSession,
    requester: CompletionRequester,
    *,
    owner_id: str,
    focus: Any,
    outcome: Any,
) -> GenerateRoadmapResponse:
    """Generate and store a study roadmap for ``owner_id``.

    Raises:
        ValidationError: ``focus`` or ``outcome`` missing or blank
        CompletionRequestError: Completion endpoint failed or timed out
        EmptyModelResponse / MalformedModelResponse: Unusable model output
        PersistenceFailure: Store write failed (possibly after the plan row)
    """
    focus_text = _required_text(focus)
    outcome_text = _required_text(outcome)
    if focus_text is None or outcome_text is None:
        raise ValidationError("Fields 'focus' and 'outcome' are required")

    logger.info("Generating roadmap", owner_id=owner_id, focus=focus_text)
    content = await requester.complete(
        PLANNER_SYSTEM_PROMPT,
        build_user_prompt(focus_text, outcome_text),
    )
    draft = parse_roadmap_response(content)

    persisted = await persist_roadmap(
        db,
        draft,
        owner_id=owner_id,
        focus=focus_text,
        outcome=outcome_text,
    )
    return GenerateRoadmapResponse(
        plan_id=persisted.plan_id,
        title=persisted.title,
        roadmap=draft.model_dump(by_alias=True),
    )
