"""
Configuration for itinerary generation.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GenerationConfig:
    """
    Configuration for itinerary generation.

    Attributes:
        model: LLM model identifier
        temperature: Sampling temperature (higher, for varied itineraries)
        max_tokens: Completion token cap; a whole itinerary must fit
        max_description_length: Longest accepted trip description, in characters
        max_events: Event cap stated in the generation prompt
    """

    # LLM configuration
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 16000

    # Request limits
    max_description_length: int = 2000
    max_events: int = 25


# Default configuration instance
DEFAULT_CONFIG = GenerationConfig()


def get_config(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    max_description_length: Optional[int] = None,
    max_events: Optional[int] = None,
) -> GenerationConfig:
    """
    Create a configuration with optional overrides.

    Returns:
        GenerationConfig with specified overrides applied
    """
    return GenerationConfig(
        model=model or DEFAULT_CONFIG.model,
        temperature=temperature if temperature is not None else DEFAULT_CONFIG.temperature,
        max_tokens=max_tokens or DEFAULT_CONFIG.max_tokens,
        max_description_length=max_description_length or DEFAULT_CONFIG.max_description_length,
        max_events=max_events or DEFAULT_CONFIG.max_events,
    )
