"""
LLM nodes for the agent graph.

call_model sends the conversation with the three event tools attached.
When the model calls tools, propose_actions converts the calls into
proposals and summarize asks for a short reply describing them.
"""

import json
import logging
import time
from typing import Any, Dict

from trip_assistant.agent.prompts import build_system_message
from trip_assistant.agent.schemas import AgentDependencies, AgentState
from trip_assistant.agent.tools import TOOL_DEFINITIONS, parse_tool_calls_to_actions
from trip_assistant.agent.nodes.turn import complete_turn
from trip_assistant.events.serializer import (
    create_ai_context,
    estimate_token_count,
    serialize_events_for_ai,
)
from trip_assistant.shared.errors import ContextTooLargeError, UpstreamCallError
from trip_assistant.shared.logging.telemetry import calculate_cost


logger = logging.getLogger(__name__)

TOOL_ACKNOWLEDGEMENT = json.dumps({"success": True, "status": "proposed_to_user"})


def call_model_node(state: AgentState, deps: AgentDependencies) -> Dict[str, Any]:
    """
    Build the trip context and call the model with tools.

    Raises:
        ContextTooLargeError: If the estimate exceeds context_token_limit
        UpstreamCallError: If the call fails
    """
    config = deps.config
    _log = f"[trip={state['trip_id']}] [graph=agent] [node=call_model] "

    context = create_ai_context(
        state["trip_name"],
        state["trip_start"],
        state["trip_end"],
        serialize_events_for_ai(state["events"]),
    )
    estimated_tokens = estimate_token_count(context)
    if estimated_tokens > config.context_token_limit:
        raise ContextTooLargeError(
            "Trip is too large for AI analysis. Please try a more specific question."
        )

    llm_messages = [{"role": "system", "content": build_system_message(context)}]
    llm_messages += [
        {"role": message.role, "content": message.content} for message in state["messages"]
    ]

    logger.info(
        f"{_log}Calling LLM | model={config.model}, messages={len(llm_messages)}, "
        f"estimated_tokens={estimated_tokens}"
    )
    start_time = time.perf_counter()
    try:
        result = deps.llm.complete(
            llm_messages,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            tools=TOOL_DEFINITIONS,
        )
    except Exception as e:
        logger.exception(f"{_log}LLM call failed: {e}")
        raise UpstreamCallError(f"AI agent error: {e}") from e
    duration_ms = (time.perf_counter() - start_time) * 1000

    logger.info(
        f"{_log}LLM responded | duration={duration_ms:.0f}ms, "
        f"tool_calls={len(result.tool_calls)}, tokens_in={result.prompt_tokens}, "
        f"tokens_out={result.completion_tokens}"
    )

    update = {
        "llm_messages": llm_messages,
        "first_call": result,
        "actions": [],
        "reply": result.content,
        "tokens_used": result.total_tokens,
        "prompt_tokens": result.prompt_tokens,
        "completion_tokens": result.completion_tokens,
        "estimated_cost_usd": calculate_cost(
            config.model, result.prompt_tokens, result.completion_tokens
        ),
    }
    if result.tool_calls:
        return update
    return complete_turn("reply_without_actions", state, update)


def propose_actions_node(state: AgentState, deps: AgentDependencies) -> Dict[str, Any]:
    """Turn the model's tool calls into proposed actions."""
    actions = parse_tool_calls_to_actions(state["first_call"].tool_calls, state["events"])
    logger.info(
        f"[trip={state['trip_id']}] [graph=agent] [node=propose_actions] "
        f"Actions proposed | types={[action.type for action in actions]}"
    )
    return {"actions": actions}


def summarize_node(state: AgentState, deps: AgentDependencies) -> Dict[str, Any]:
    """
    Ask for a natural-language summary of the proposed actions.

    Each tool call is acknowledged as proposed to the user. Token counts and
    cost cover both calls of the turn.

    Raises:
        UpstreamCallError: If the call fails
    """
    config = deps.config
    first_call = state["first_call"]
    _log = f"[trip={state['trip_id']}] [graph=agent] [node=summarize] "

    messages = state["llm_messages"] + [first_call.assistant_message()]
    messages += [
        {"role": "tool", "tool_call_id": call.id, "content": TOOL_ACKNOWLEDGEMENT}
        for call in first_call.tool_calls
    ]

    try:
        result = deps.llm.complete(
            messages,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.summary_max_tokens,
        )
    except Exception as e:
        logger.exception(f"{_log}Summary call failed: {e}")
        raise UpstreamCallError(f"AI agent error: {e}") from e

    prompt_tokens = first_call.prompt_tokens + result.prompt_tokens
    completion_tokens = first_call.completion_tokens + result.completion_tokens

    update = {
        "reply": result.content or first_call.content,
        "tokens_used": prompt_tokens + completion_tokens,
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "estimated_cost_usd": calculate_cost(config.model, prompt_tokens, completion_tokens),
    }
    return complete_turn("actions_proposed", state, update)
