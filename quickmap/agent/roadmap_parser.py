"""Roadmap parsing for language model responses.

A chat completion can present its answer as a plain string or as a list of
content parts. A part tagged ``json`` already carries the decoded object and
is used as-is; otherwise the first text-bearing part is trimmed and decoded
with strict ``json.loads``. Text that does not decode is reported verbatim.
"""

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from quickmap.core.errors import EmptyModelResponse, MalformedModelResponse
from quickmap.core.logging import get_logger
from quickmap.schemas.roadmap import RoadmapDraft

logger = get_logger(__name__)

_MISSING = object()


def _find_json_part(parts: list[Any]) -> Any:
    """Return the payload of the first part tagged as parsed JSON."""
    for part in parts:
        if isinstance(part, dict) and part.get("type") == "json" and "json" in part:
            return part["json"]
    return _MISSING


def _find_text(parts: list[Any]) -> str | None:
    """Return the first non-blank text carried by a content part."""
    for part in parts:
        if isinstance(part, str):
            text = part
        elif isinstance(part, dict) and part.get("type") == "text":
            text = part.get("text")
        else:
            continue
        if isinstance(text, str) and text.strip():
            return text
    return None


def extract_roadmap_json(content: str | list[Any] | None) -> Any:
    """Pull the JSON value out of a completion's content.

    Args:
        content: ``AIMessage.content`` - a string, a list of parts, or None

    Returns:
        Decoded JSON value (not yet validated as a roadmap)

    Raises:
        EmptyModelResponse: No usable content at all
        MalformedModelResponse: Text present but not valid JSON
    """
    if isinstance(content, list):
        parsed = _find_json_part(content)
        if parsed is not _MISSING:
            logger.debug("Using pre-parsed JSON content part")
            return parsed
        text = _find_text(content)
    elif isinstance(content, str) and content.strip():
        text = content
    else:
        text = None

    if text is None:
        raise EmptyModelResponse()

    try:
        return json.loads(text.strip())
    except (json.JSONDecodeError, ValueError):
        logger.error("Failed to parse roadmap JSON", content_preview=text[:200])
        raise MalformedModelResponse(text) from None


def parse_roadmap_response(content: str | list[Any] | None) -> RoadmapDraft:
    """Parse a completion into a typed roadmap draft.

    Raises:
        EmptyModelResponse: No usable content at all
        MalformedModelResponse: Not JSON, or JSON not shaped like a roadmap
    """
    data = extract_roadmap_json(content)

    if not isinstance(data, dict):
        raise MalformedModelResponse(
            _as_raw_text(content, data), message="Roadmap JSON must be an object"
        )

    try:
        draft = RoadmapDraft.model_validate(data)
    except PydanticValidationError as exc:
        logger.error("Roadmap JSON has unexpected structure", errors=exc.error_count())
        raise MalformedModelResponse(
            _as_raw_text(content, data), message="Roadmap JSON has unexpected structure"
        ) from None

    logger.info(
        "Roadmap parsed",
        plan_title=draft.plan_title,
        milestone_count=len(draft.milestones),
    )
    return draft


def _as_raw_text(content: str | list[Any] | None, data: Any) -> str:
    """Original text when there was one, otherwise the parsed part re-serialized."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        if _find_json_part(content) is _MISSING:
            text = _find_text(content)
            if text is not None:
                return text
    return json.dumps(data, ensure_ascii=False)
