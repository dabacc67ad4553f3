"""
Routing logic for the agent graph.
"""

from typing import Literal

from trip_assistant.agent.schemas import AgentState


def route_after_classify(state: AgentState) -> Literal["deterministic_reply", "call_model"]:
    """Short-circuit catalogue questions, send everything else to the model."""
    if state.get("deterministic") and state.get("function_name"):
        return "deterministic_reply"
    return "call_model"


def route_after_model(state: AgentState) -> Literal["propose_actions", "complete"]:
    """Continue to proposals only when the model called tools."""
    first_call = state.get("first_call")
    if first_call is not None and first_call.tool_calls:
        return "propose_actions"
    return "complete"
