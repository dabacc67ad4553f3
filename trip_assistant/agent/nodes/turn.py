"""
Turn classification and the deterministic short-circuit.

When the latest user message is a catalogue question, the turn is answered
from structured data with no tool calls, exactly like the query resolver's
deterministic branch.
"""

import logging
import time
from typing import Any, Dict

from trip_assistant.agent.schemas import AgentDependencies, AgentState
from trip_assistant.query.aggregates import execute_deterministic_function
from trip_assistant.query.classifier import classify_query
from trip_assistant.shared.contracts.query import QueryTelemetry
from trip_assistant.shared.logging.config import log_state_transition


logger = logging.getLogger(__name__)


def complete_turn(event: str, state: AgentState, update: Dict[str, Any]) -> Dict[str, Any]:
    """Stamp latency on a terminal update and log the transition."""
    update["latency_ms"] = int((time.perf_counter() - state["started_at"]) * 1000)
    merged = {**state, **update}
    log_state_transition(
        event,
        merged,
        extra={
            "latency_ms": update["latency_ms"],
            "actions": len(merged.get("actions") or []),
        },
    )
    return update


def classify_turn_node(state: AgentState, deps: AgentDependencies) -> Dict[str, Any]:
    """Find the latest user message and classify it."""
    question = next(
        (message.content for message in reversed(state["messages"]) if message.role == "user"),
        None,
    )
    if question is None:
        return {"question": None, "deterministic": False, "function_name": None}

    classification = classify_query(question)
    if classification.is_deterministic:
        logger.info(
            f"[trip={state['trip_id']}] [graph=agent] [node=classify_turn] "
            f"Deterministic query detected | function={classification.function_name}"
        )
    return {
        "question": question,
        "deterministic": classification.is_deterministic,
        "function_name": classification.function_name,
    }


def deterministic_reply_node(state: AgentState, deps: AgentDependencies) -> Dict[str, Any]:
    """Answer from the aggregate library, cache it, and emit telemetry."""
    reply = execute_deterministic_function(
        state["function_name"],
        state["events"],
        state["trip_start"],
        state["trip_end"],
    )

    deps.cache.put(state["trip_id"], state["question"], reply, 0)

    update = complete_turn(
        "deterministic_answer",
        state,
        {
            "reply": reply,
            "actions": [],
            "tokens_used": 0,
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "estimated_cost_usd": 0.0,
        },
    )
    deps.telemetry.emit(
        QueryTelemetry(
            trip_id=state["trip_id"],
            question=state["question"],
            answer=reply,
            latency_ms=update["latency_ms"],
            deterministic=True,
        )
    )
    return update
