"""
JSON parsing for LLM output.

LLM responses are parsed as JSON directly first. When that fails, one
fallback attempt is made on the outermost ``{...}`` block, which recovers
JSON wrapped in markdown code fences or surrounded by prose.
"""

import json
import logging
import re
from typing import Any

from trip_assistant.shared.errors import ParseError


logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_outermost_object(raw_response: str) -> str:
    """
    Return the substring from the first ``{`` to the last ``}``.

    Prefers the contents of a markdown code block when one is present.

    Raises:
        ParseError: If no object boundaries are found
    """
    content = raw_response.strip()

    match = CODE_BLOCK_PATTERN.search(content)
    if match:
        content = match.group(1).strip()

    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end <= start:
        raise ParseError("No JSON object found in response")
    return content[start : end + 1]


def parse_json_response(raw_response: str) -> Any:
    """
    Parse LLM output as JSON, with one outermost-object fallback.

    Args:
        raw_response: Raw text returned by the model

    Returns:
        The decoded JSON value

    Raises:
        ParseError: If both the direct parse and the fallback fail
    """
    try:
        return json.loads(raw_response)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Direct JSON parse failed, trying outermost object: {e}")

    candidate = extract_outermost_object(raw_response or "")
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}\nContent: {candidate[:500]}")
