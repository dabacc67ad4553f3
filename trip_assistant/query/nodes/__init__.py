"""Node functions for the query graph."""

from trip_assistant.query.nodes.lookup import cache_lookup_node, classify_node, validate_node
from trip_assistant.query.nodes.deterministic import deterministic_node
from trip_assistant.query.nodes.llm_answer import build_context_node, llm_answer_node
from trip_assistant.query.nodes.routing import route_after_cache, route_after_classify

__all__ = [
    "validate_node",
    "cache_lookup_node",
    "classify_node",
    "deterministic_node",
    "build_context_node",
    "llm_answer_node",
    "route_after_cache",
    "route_after_classify",
]
