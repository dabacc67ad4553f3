"""
Configuration for the query resolver.

Centralizes model settings and request limits so they can be tuned
without touching the graph wiring.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class QueryGraphConfig:
    """
    Configuration for the query graph.

    Attributes:
        model: LLM model identifier
        temperature: Sampling temperature (low, to favor deterministic answers)
        max_tokens: Completion token cap for the answer
        context_token_limit: Estimated context tokens above which the LLM is not called
        max_question_length: Longest accepted question, in characters
        max_answer_chars: Answers are truncated to this many characters
        cache_ttl_hours: Lifetime of a cached answer
    """

    # LLM configuration
    model: str = "gpt-4o-mini"
    temperature: float = 0.1
    max_tokens: int = 500

    # Request limits
    context_token_limit: int = 15000
    max_question_length: int = 500
    max_answer_chars: int = 2000

    # Cache
    cache_ttl_hours: int = 24


# Default configuration instance
DEFAULT_CONFIG = QueryGraphConfig()


def get_config(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    context_token_limit: Optional[int] = None,
    max_question_length: Optional[int] = None,
    max_answer_chars: Optional[int] = None,
    cache_ttl_hours: Optional[int] = None,
) -> QueryGraphConfig:
    """
    Create a configuration with optional overrides.

    Returns:
        QueryGraphConfig with specified overrides applied
    """
    return QueryGraphConfig(
        model=model or DEFAULT_CONFIG.model,
        temperature=temperature if temperature is not None else DEFAULT_CONFIG.temperature,
        max_tokens=max_tokens or DEFAULT_CONFIG.max_tokens,
        context_token_limit=context_token_limit or DEFAULT_CONFIG.context_token_limit,
        max_question_length=max_question_length or DEFAULT_CONFIG.max_question_length,
        max_answer_chars=max_answer_chars or DEFAULT_CONFIG.max_answer_chars,
        cache_ttl_hours=cache_ttl_hours or DEFAULT_CONFIG.cache_ttl_hours,
    )
