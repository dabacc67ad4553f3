"""
Routing logic for the query graph.

Each branch is terminal: a cache hit or a deterministic answer ends the
request before the LLM path is reached.
"""

from typing import Literal

from trip_assistant.query.schemas import QueryState


def route_after_cache(state: QueryState) -> Literal["classify", "complete"]:
    """Stop on a cache hit, otherwise classify the question."""
    if state.get("cached"):
        return "complete"
    return "classify"


def route_after_classify(state: QueryState) -> Literal["deterministic", "build_context"]:
    """Send catalogue questions to the deterministic node, the rest to the LLM path."""
    if state.get("deterministic") and state.get("function_name"):
        return "deterministic"
    return "build_context"
