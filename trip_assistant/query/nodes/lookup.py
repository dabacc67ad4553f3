"""
Validation, cache lookup and classification nodes.

These run before any LLM work. Validation failures raise before the cache
is touched.
"""

import logging
from typing import Any, Dict

from trip_assistant.query.classifier import classify_query
from trip_assistant.query.nodes.telemetry import record_outcome
from trip_assistant.query.schemas import QueryDependencies, QueryState
from trip_assistant.query.validation import validate_question


logger = logging.getLogger(__name__)


def validate_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    """Reject empty, oversized or injection-like questions."""
    validate_question(state.get("question"), max_length=deps.config.max_question_length)
    return {"cached": False, "deterministic": False}


def cache_lookup_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    """
    Return a previous answer for the same trip and question, if any.

    A hit costs zero additional tokens: prompt/completion counts and cost
    are reported as 0 while tokens_used carries the cached figure.
    """
    _log = f"[trip={state['trip_id']}] [graph=query] [node=cache_lookup] "

    entry = deps.cache.get(state["trip_id"], state["question"])
    if entry is None:
        logger.info(f"{_log}Cache miss")
        return {}

    logger.info(f"{_log}Cache hit | tokens_used={entry.tokens_used}")
    update = {
        "cached": True,
        "answer": entry.answer,
        "tokens_used": entry.tokens_used,
        "prompt_tokens": 0,
        "completion_tokens": 0,
        "estimated_cost_usd": 0.0,
    }
    return record_outcome("cache_hit", state, update, deps)


def classify_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    """Decide between a deterministic function and the LLM."""
    classification = classify_query(state["question"])
    if classification.is_deterministic:
        logger.info(
            f"[trip={state['trip_id']}] [graph=query] [node=classify] "
            f"Deterministic query detected | function={classification.function_name}"
        )
    return {
        "deterministic": classification.is_deterministic,
        "function_name": classification.function_name,
    }
