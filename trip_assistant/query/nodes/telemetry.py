"""
Telemetry emission shared by the terminal query nodes.
"""

import time
from typing import Any, Dict

from trip_assistant.query.schemas import QueryDependencies, QueryState
from trip_assistant.shared.contracts.query import QueryTelemetry
from trip_assistant.shared.logging.config import log_state_transition


def elapsed_ms(state: QueryState) -> int:
    return int((time.perf_counter() - state["started_at"]) * 1000)


def record_outcome(
    event: str,
    state: QueryState,
    update: Dict[str, Any],
    deps: QueryDependencies,
) -> Dict[str, Any]:
    """
    Stamp latency on a terminal update, emit telemetry, log the transition.

    Returns:
        The update with latency_ms filled in
    """
    update["latency_ms"] = elapsed_ms(state)
    merged = {**state, **update}

    deps.telemetry.emit(
        QueryTelemetry(
            user_id=merged.get("user_id"),
            trip_id=merged["trip_id"],
            question=merged["question"],
            answer=merged["answer"],
            tokens_used=merged.get("tokens_used", 0),
            prompt_tokens=merged.get("prompt_tokens", 0),
            completion_tokens=merged.get("completion_tokens", 0),
            estimated_cost_usd=merged.get("estimated_cost_usd", 0.0),
            latency_ms=update["latency_ms"],
            cached=merged.get("cached", False),
            deterministic=merged.get("deterministic", False),
        )
    )
    log_state_transition(event, merged, extra={"latency_ms": update["latency_ms"]})
    return update
