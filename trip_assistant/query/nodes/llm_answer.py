"""
LLM answer path.

Builds the token-bounded trip context and asks the model when no
deterministic function applies.
"""

import logging
import time
from typing import Any, Dict

from trip_assistant.events.serializer import (
    create_ai_context,
    estimate_token_count,
    serialize_events_for_ai,
)
from trip_assistant.query.nodes.telemetry import record_outcome
from trip_assistant.query.prompts import SYSTEM_PROMPT, build_user_prompt
from trip_assistant.query.schemas import QueryDependencies, QueryState
from trip_assistant.query.validation import sanitize_response
from trip_assistant.shared.errors import ContextTooLargeError, UpstreamCallError
from trip_assistant.shared.logging.telemetry import calculate_cost


logger = logging.getLogger(__name__)


def build_context_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    """
    Serialize events and trip bounds, refusing contexts over the token ceiling.

    Raises:
        ContextTooLargeError: If the estimate exceeds context_token_limit
    """
    trip = state["trip"]
    context = create_ai_context(
        trip.name,
        trip.start_date,
        trip.end_date,
        serialize_events_for_ai(state["events"]),
    )
    estimated_tokens = estimate_token_count(context)

    logger.info(
        f"[trip={state['trip_id']}] [graph=query] [node=build_context] "
        f"Context built | events={len(state['events'])}, estimated_tokens={estimated_tokens}"
    )

    if estimated_tokens > deps.config.context_token_limit:
        raise ContextTooLargeError(
            "Trip is too large for AI analysis (too many events). "
            "Please try a more specific question."
        )

    return {"context": context, "estimated_tokens": estimated_tokens}


def llm_answer_node(state: QueryState, deps: QueryDependencies) -> Dict[str, Any]:
    """
    Ask the LLM, sanitize the answer, price the call and cache the result.

    Raises:
        UpstreamCallError: If the call fails or returns no content
    """
    config = deps.config
    _log = f"[trip={state['trip_id']}] [graph=query] [node=llm_answer] "

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(state["context"], state["question"])},
    ]

    logger.info(f"{_log}Calling LLM | model={config.model}")
    start_time = time.perf_counter()
    try:
        result = deps.llm.complete(
            messages,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
    except Exception as e:
        logger.exception(f"{_log}LLM call failed: {e}")
        raise UpstreamCallError(f"AI query failed: {e}") from e
    duration_ms = (time.perf_counter() - start_time) * 1000

    if not result.content:
        raise UpstreamCallError("AI query failed: the model returned an empty answer")

    answer = sanitize_response(result.content, max_chars=config.max_answer_chars)
    cost = calculate_cost(config.model, result.prompt_tokens, result.completion_tokens)

    logger.info(
        f"{_log}LLM responded | duration={duration_ms:.0f}ms, "
        f"tokens_in={result.prompt_tokens}, tokens_out={result.completion_tokens}"
    )

    deps.cache.put(state["trip_id"], state["question"], answer, result.total_tokens)

    update = {
        "answer": answer,
        "tokens_used": result.total_tokens,
        "prompt_tokens": result.prompt_tokens,
        "completion_tokens": result.completion_tokens,
        "estimated_cost_usd": cost,
    }
    return record_outcome("llm_answer", state, update, deps)
