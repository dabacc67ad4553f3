"""
Shared infrastructure for the resolver, the agent and the generator.

Modules:
- llm: OpenAI client with retry logic
- logging: Logging setup and usage telemetry
- contracts: Event, query and agent contracts
- cache: Response cache
- stores: Trip and event store interface
"""

from trip_assistant.shared.llm.client import LLMClient, create_openai_client
from trip_assistant.shared.logging.config import setup_logging, log_state_transition

__all__ = [
    "LLMClient",
    "create_openai_client",
    "setup_logging",
    "log_state_transition",
]
