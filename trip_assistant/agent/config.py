"""
Configuration for the agent orchestrator.

The context ceiling is higher than the query resolver's because the
conversation history is sent alongside the trip data.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AgentGraphConfig:
    """
    Configuration for the agent graph.

    Attributes:
        model: LLM model identifier
        temperature: Sampling temperature for both calls in a turn
        max_tokens: Completion token cap for the tool-calling call
        summary_max_tokens: Completion token cap for the follow-up summary
        context_token_limit: Estimated context tokens above which the LLM is not called
    """

    # LLM configuration
    model: str = "gpt-4o-mini"
    temperature: float = 0.3
    max_tokens: int = 2000
    summary_max_tokens: int = 500

    # Request limits
    context_token_limit: int = 30000


# Default configuration instance
DEFAULT_CONFIG = AgentGraphConfig()


def get_config(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    summary_max_tokens: Optional[int] = None,
    context_token_limit: Optional[int] = None,
) -> AgentGraphConfig:
    """
    Create a configuration with optional overrides.

    Returns:
        AgentGraphConfig with specified overrides applied
    """
    return AgentGraphConfig(
        model=model or DEFAULT_CONFIG.model,
        temperature=temperature if temperature is not None else DEFAULT_CONFIG.temperature,
        max_tokens=max_tokens or DEFAULT_CONFIG.max_tokens,
        summary_max_tokens=summary_max_tokens or DEFAULT_CONFIG.summary_max_tokens,
        context_token_limit=context_token_limit or DEFAULT_CONFIG.context_token_limit,
    )
