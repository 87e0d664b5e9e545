"""
Tests for JSON extraction from free-form model output.
"""

import pytest

from docenhancer.utils.exceptions import InvalidResponseFormatError
from docenhancer.utils.json_extract import RAW_EXCERPT_CHARS, extract_json_object


@pytest.mark.unit
class TestExtractJsonObject:
    """Test extract_json_object lookup order and failure details."""

    def test_bare_object(self):
        assert extract_json_object('{"action": "replace", "new_html": "<p>x</p>"}') == {
            "action": "replace",
            "new_html": "<p>x</p>",
        }

    def test_fenced_json_block(self):
        text = 'Here you go:\n```json\n{"action": "replace", "new_html": "<p>a</p>"}\n```\nDone.'

        assert extract_json_object(text)["new_html"] == "<p>a</p>"

    def test_bare_fence(self):
        text = '```\n{"summary": "s"}\n```'

        assert extract_json_object(text) == {"summary": "s"}

    def test_fenced_and_unfenced_parse_identically(self):
        payload = '{"action": "replace", "new_html": "<p>same</p>"}'

        assert extract_json_object(f"```json\n{payload}\n```") == extract_json_object(payload)

    def test_object_embedded_in_prose(self):
        text = 'Sure! {"summary": "A guide", "keyTerms": []} Hope this helps.'

        assert extract_json_object(text)["summary"] == "A guide"

    def test_stray_brace_before_object(self):
        text = 'Note {not json} then {"ok": true}'

        assert extract_json_object(text) == {"ok": True}

    def test_braces_inside_strings(self):
        text = '{"new_html": "<code>{x}</code>"}'

        assert extract_json_object(text)["new_html"] == "<code>{x}</code>"

    def test_fenced_block_takes_precedence(self):
        text = '{"first": 1}\n```json\n{"second": 2}\n```'

        assert extract_json_object(text) == {"second": 2}

    def test_invalid_json_raises_with_excerpt(self):
        text = "I cannot help with that. " * 20

        with pytest.raises(InvalidResponseFormatError) as exc_info:
            extract_json_object(text)

        assert exc_info.value.message == "AI returned invalid JSON format"
        assert exc_info.value.details == text[:RAW_EXCERPT_CHARS]
        assert exc_info.value.status_code == 500

    def test_json_array_is_not_an_object(self):
        with pytest.raises(InvalidResponseFormatError):
            extract_json_object("[1, 2, 3]")
