"""
Agent orchestrator for mutation-capable trip conversations.

Each turn either answers deterministically or calls the model with the
create/edit/delete event tools and returns proposed actions.
"""

from trip_assistant.agent.config import AgentGraphConfig
from trip_assistant.agent.orchestrator import AgentOrchestrator
from trip_assistant.agent.tools import TOOL_DEFINITIONS, parse_tool_calls_to_actions

__all__ = [
    "AgentGraphConfig",
    "AgentOrchestrator",
    "TOOL_DEFINITIONS",
    "parse_tool_calls_to_actions",
]
