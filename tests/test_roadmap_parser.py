"""Tests for roadmap parsing of language model responses."""

import json

import pytest

from quickmap.agent.roadmap_parser import extract_roadmap_json, parse_roadmap_response
from quickmap.core.errors import EmptyModelResponse, MalformedModelResponse

MINIMAL = '{"planTitle": "Learn Go", "milestones": []}'


class TestContentShapes:
    """Content may be a string or a list of parts."""

    def test_plain_string(self):
        result = extract_roadmap_json('{"key": "value"}')
        assert result == {"key": "value"}

    def test_whitespace_is_trimmed(self):
        result = extract_roadmap_json('  \n  {"key": "value"}  \n  ')
        assert result == {"key": "value"}

    def test_unicode(self):
        result = extract_roadmap_json('{"planTitle": "学习 Go"}')
        assert result == {"planTitle": "学习 Go"}

    def test_pre_parsed_json_part_used_as_is(self):
        """A part tagged json wins over text parts and is not re-decoded."""
        parts = [
            {"type": "text", "text": "not json"},
            {"type": "json", "json": {"planTitle": "From part"}},
        ]
        assert extract_roadmap_json(parts) == {"planTitle": "From part"}

    def test_first_text_part(self):
        parts = [{"type": "text", "text": MINIMAL}, {"type": "text", "text": "ignored"}]
        assert extract_roadmap_json(parts) == {"planTitle": "Learn Go", "milestones": []}

    def test_string_items_count_as_text(self):
        assert extract_roadmap_json([MINIMAL]) == {"planTitle": "Learn Go", "milestones": []}

    def test_blank_parts_are_skipped(self):
        parts = [{"type": "text", "text": "   "}, {"type": "image_url"}, MINIMAL]
        assert extract_roadmap_json(parts)["planTitle"] == "Learn Go"


class TestEmptyResponses:
    """Nothing usable raises EmptyModelResponse."""

    @pytest.mark.parametrize("content", [None, "", "   \n", [], [{"type": "text", "text": ""}]])
    def test_empty(self, content):
        with pytest.raises(EmptyModelResponse):
            extract_roadmap_json(content)

    def test_non_text_parts_only(self):
        with pytest.raises(EmptyModelResponse):
            extract_roadmap_json([{"type": "image_url", "image_url": {"url": "x"}}])


class TestMalformedResponses:
    """Undecodable text is reported verbatim."""

    def test_invalid_json_keeps_raw_text(self):
        with pytest.raises(MalformedModelResponse) as exc_info:
            extract_roadmap_json("Sure! Here is your plan: {")
        assert exc_info.value.raw_text == "Sure! Here is your plan: {"
        assert exc_info.value.to_payload()["raw"] == "Sure! Here is your plan: {"
        assert exc_info.value.status_code == 502

    def test_code_fence_is_not_stripped(self):
        fenced = f"```json\n{MINIMAL}\n```"
        with pytest.raises(MalformedModelResponse) as exc_info:
            extract_roadmap_json(fenced)
        assert exc_info.value.raw_text == fenced

    def test_trailing_comma_is_rejected(self):
        with pytest.raises(MalformedModelResponse):
            extract_roadmap_json('{"a": 1,}')

    def test_top_level_array_is_not_a_roadmap(self):
        with pytest.raises(MalformedModelResponse, match="must be an object"):
            parse_roadmap_response("[1, 2, 3]")

    def test_wrong_nested_shape(self):
        raw = '{"milestones": "soon"}'
        with pytest.raises(MalformedModelResponse, match="unexpected structure") as exc_info:
            parse_roadmap_response(raw)
        assert exc_info.value.raw_text == raw

    def test_wrong_shape_in_json_part_is_reserialized(self):
        parts = [{"type": "json", "json": {"milestones": 3}}]
        with pytest.raises(MalformedModelResponse) as exc_info:
            parse_roadmap_response(parts)
        assert json.loads(exc_info.value.raw_text) == {"milestones": 3}


class TestRoadmapDraft:
    """Parsed drafts tolerate missing and null fields."""

    def test_full_roadmap(self):
        draft = parse_roadmap_response(
            json.dumps(
                {
                    "planTitle": "Learn Go",
                    "focus": "Go",
                    "outcome": "CLI tools",
                    "estimatedDurationWeeks": 6,
                    "milestones": [
                        {
                            "title": "Basics",
                            "estimatedDuration": "2 weeks",
                            "steps": [
                                {
                                    "title": "Tour",
                                    "resources": [{"type": "link", "url": "https://go.dev"}],
                                }
                            ],
                        }
                    ],
                }
            )
        )
        assert draft.plan_title == "Learn Go"
        assert draft.estimated_duration_weeks == 6
        assert draft.milestones[0].estimated_duration == "2 weeks"
        assert draft.milestones[0].steps[0].resources[0].url == "https://go.dev"

    def test_empty_object(self):
        draft = parse_roadmap_response("{}")
        assert draft.plan_title is None
        assert draft.milestones == []

    def test_null_arrays_become_empty(self):
        draft = parse_roadmap_response(
            '{"milestones": [{"title": "M", "steps": [{"title": "S", "resources": null}]}, '
            '{"title": "N", "steps": null}]}'
        )
        assert draft.milestones[0].steps[0].resources == []
        assert draft.milestones[1].steps == []

    def test_unknown_keys_are_ignored(self):
        draft = parse_roadmap_response('{"planTitle": "X", "difficulty": "hard"}')
        assert draft.plan_title == "X"

    def test_numeric_text_fields_are_coerced(self):
        draft = parse_roadmap_response('{"milestones": [{"title": 1, "estimatedDuration": 2}]}')
        assert draft.milestones[0].title == "1"
        assert draft.milestones[0].estimated_duration == "2"

    def test_dump_uses_wire_names(self):
        draft = parse_roadmap_response(MINIMAL)
        dumped = draft.model_dump(by_alias=True)
        assert dumped["planTitle"] == "Learn Go"
        assert "estimatedDurationWeeks" in dumped
