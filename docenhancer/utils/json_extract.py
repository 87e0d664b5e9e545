"""
Locate and parse the first JSON object in free-form model output.

Models frequently wrap their JSON in prose or markdown code fences. Lookup
order is: fenced code blocks (```json or bare ```), then the first ``{``
anywhere in the text from which a complete object decodes.
"""

import json
import re
from collections.abc import Iterator
from typing import Any

from docenhancer.utils.exceptions import InvalidResponseFormatError

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)

RAW_EXCERPT_CHARS = 200

_decoder = json.JSONDecoder()


def iter_fenced_blocks(text: str) -> Iterator[str]:
    """Yield the bodies of markdown code fences in order of appearance."""
    for match in FENCED_BLOCK_PATTERN.finditer(text):
        body = match.group(1).strip()
        if body:
            yield body


def iter_embedded_objects(text: str) -> Iterator[dict[str, Any]]:
    """
    Yield JSON objects embedded in text, scanning opening braces left to right.

    Each ``{`` is tried as the start of an object; braces inside string
    literals are handled by the JSON decoder, so stray braces in prose only
    cost a failed attempt.
    """
    position = text.find("{")
    while position != -1:
        try:
            value, end = _decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            position = text.find("{", position + 1)
            continue
        if isinstance(value, dict):
            yield value
            position = text.find("{", end)
        else:
            position = text.find("{", position + 1)


def _first_object(text: str) -> dict[str, Any] | None:
    return next(iter_embedded_objects(text), None)


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parse the first well-formed JSON object found in text.

    Args:
        text: Raw model output

    Returns:
        Parsed JSON object

    Raises:
        InvalidResponseFormatError: If no JSON object can be parsed. The
            error details carry a truncated excerpt of the raw text.
    """
    for block in iter_fenced_blocks(text):
        parsed = _first_object(block)
        if parsed is not None:
            return parsed

    parsed = _first_object(text)
    if parsed is not None:
        return parsed

    raise InvalidResponseFormatError(
        "AI returned invalid JSON format",
        details=text[:RAW_EXCERPT_CHARS],
    )
