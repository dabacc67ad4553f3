"""
Deterministic answer node.

Computes the answer from structured data, caches it with zero token cost,
and records telemetry.
"""

import logging
from typing import Any, Dict

from trip_assistant.query.aggregates import execute_deterministic_function
from trip_assistant.query.nodes.telemetry import record_outcome
from trip_assistant.query.schemas import QueryDependencies, QueryState


logger = logging.getLogger(__name__)


def deterministic_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    trip = state["trip"]
    answer = execute_deterministic_function(
        state["function_name"],
        state["events"],
        trip.start_date,
        trip.end_date,
    )

    logger.info(
        f"[trip={state['trip_id']}] [graph=query] [node=deterministic] "
        f"Answered | function={state['function_name']}"
    )

    deps.cache.put(state["trip_id"], state["question"], answer, 0)

    update = {
        "answer": answer,
        "tokens_used": 0,
        "prompt_tokens": 0,
        "completion_tokens": 0,
        "estimated_cost_usd": 0.0,
    }
    return record_outcome("deterministic_answer", state, update, deps)
