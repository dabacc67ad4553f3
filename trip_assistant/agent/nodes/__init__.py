"""Node functions for the agent graph."""

from trip_assistant.agent.nodes.turn import classify_turn_node, deterministic_reply_node
from trip_assistant.agent.nodes.model import call_model_node, propose_actions_node, summarize_node
from trip_assistant.agent.nodes.routing import route_after_classify, route_after_model

__all__ = [
    "classify_turn_node",
    "deterministic_reply_node",
    "call_model_node",
    "propose_actions_node",
    "summarize_node",
    "route_after_classify",
    "route_after_model",
]
