"""
Question validation and answer sanitization.

Questions are checked before any cache or LLM work. Answers from the LLM
are stripped of markdown images and script tags and truncated.
"""

import re
from typing import Any

from trip_assistant.shared.errors import ValidationError


# Prompt-injection phrasing rejected outright
SUSPICIOUS_PATTERNS = (
    re.compile(r"ignore previous instructions", re.IGNORECASE),
    re.compile(r"system:", re.IGNORECASE),
    re.compile(r"assistant:", re.IGNORECASE),
    re.compile(r"forget everything", re.IGNORECASE),
    re.compile(r"disregard", re.IGNORECASE),
)

MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[.*?\]\(.*?\)")
SCRIPT_TAG_PATTERN = re.compile(r"<script.*?</script>", re.IGNORECASE | re.DOTALL)


def validate_question(question: Any, max_length: int = 500) -> str:
    """
    Validate a user question.

    Args:
        question: Raw question value from the caller
        max_length: Longest accepted question in characters

    Returns:
        The question, unchanged

    Raises:
        ValidationError: If the question is empty, not a string, too long,
            or matches a prompt-injection pattern
    """
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question must be a non-empty string")

    if len(question) > max_length:
        raise ValidationError(f"Question too long (max {max_length} characters)")

    for pattern in SUSPICIOUS_PATTERNS:
        if pattern.search(question):
            raise ValidationError("Invalid question format")

    return question


def sanitize_response(response: str, max_chars: int = 2000) -> str:
    """Strip markdown images and script tags, then hard-truncate."""
    cleaned = MARKDOWN_IMAGE_PATTERN.sub("", response)
    cleaned = SCRIPT_TAG_PATTERN.sub("", cleaned)
    return cleaned[:max_chars]
