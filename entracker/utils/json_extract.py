"""Extraction of a JSON object from free-form completion text."""

import json
import re
from typing import Any

from entracker.exceptions import MalformedOracleOutputError

__all__ = ["extract_json_object", "find_json_span"]

# ```json ... ``` (the language tag is optional)
FENCED_BLOCK_PATTERN = re.compile(
    r"```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)```", re.IGNORECASE | re.DOTALL
)


def find_json_span(text: str) -> str | None:
    """Locate the candidate JSON text inside a completion.

    A fenced block wins when it contains a brace; otherwise the span from the
    first `{` to the last `}` of the whole text is used.

    Args:
        text (str): Raw completion text.

    Returns:
        str | None: The candidate span, or None if no braces are present.
    """
    for match in FENCED_BLOCK_PATTERN.finditer(text):
        block = match.group(1).strip()
        if "{" in block:
            return _brace_span(block)
    return _brace_span(text)


def _brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json_object(text: str | None) -> dict[str, Any]:
    """Parse the JSON object embedded in a completion.

    Args:
        text (str | None): Raw completion text.

    Returns:
        dict[str, Any]: The decoded object.

    Raises:
        MalformedOracleOutputError: If no object can be located or decoded.
    """
    if not text or not text.strip():
        raise MalformedOracleOutputError("AI response was empty")

    span = find_json_span(text)
    if span is None:
        raise MalformedOracleOutputError("AI response did not contain a JSON object")

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise MalformedOracleOutputError(
            f"AI response did not contain valid JSON: {e.msg}"
        ) from e

    if not isinstance(data, dict):
        raise MalformedOracleOutputError("AI response JSON is not an object")
    return data
