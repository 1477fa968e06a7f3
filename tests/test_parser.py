# =============================================================================
# Unit Tests — Structured Response Parser
# =============================================================================

from __future__ import annotations

import pytest

from mcq_review.errors import ParseError
from mcq_review.services.parser import parse_structured, strip_wrappers


class TestStripWrappers:
    """Tests for fence and reasoning-block removal."""

    def test_json_fence_removed(self):
        assert strip_wrappers('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_fence_tag_case_insensitive(self):
        assert strip_wrappers('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self):
        assert strip_wrappers('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_think_block_removed(self):
        text = '<think>B looks right.\nYes.</think>\n{"a": 1}'
        assert strip_wrappers(text) == '{"a": 1}'

    def test_plain_text_untouched(self):
        assert strip_wrappers("  hello  ") == "hello"


class TestParseStructured:
    """Tests for JSON object extraction from model output."""

    def test_plain_object(self):
        assert parse_structured('{"difficulty": "Easy"}') == {"difficulty": "Easy"}

    def test_object_inside_prose(self):
        text = 'Sure! Here it is: {"quality": "Good", "score": 8} Hope this helps.'
        assert parse_structured(text) == {"quality": "Good", "score": 8}

    def test_wrapped_equals_plain(self):
        plain = '{"correctAnswer": "B", "verdict": "both_correct"}'
        wrapped = f"<think>thinking about it</think>\n```json\n{plain}\n```"
        assert parse_structured(wrapped) == parse_structured(plain)

    def test_nested_braces_kept(self):
        text = '{"outer": {"inner": [1, 2]}, "x": "y"}'
        assert parse_structured(text) == {"outer": {"inner": [1, 2]}, "x": "y"}

    def test_braces_inside_think_block_ignored(self):
        text = '<think>maybe {"wrong": true}</think>{"right": true}'
        assert parse_structured(text) == {"right": True}

    def test_no_braces_raises(self):
        with pytest.raises(ParseError, match="No JSON object"):
            parse_structured("I cannot answer that.")

    def test_empty_text_raises(self):
        with pytest.raises(ParseError):
            parse_structured("")

    def test_closing_before_opening_raises(self):
        with pytest.raises(ParseError):
            parse_structured("} nothing here {")

    def test_invalid_json_raises(self):
        with pytest.raises(ParseError, match="Invalid JSON"):
            parse_structured('{"a": 1,, }')

    def test_non_object_raises(self):
        # The span between the braces is extracted, so only objects qualify
        with pytest.raises(ParseError):
            parse_structured("[1, 2, 3]")
