"""
Graph construction for the agent orchestrator.

The graph structure is:
    Entry -> classify_turn -> route_after_classify()
                                ├→ deterministic_reply -> END
                                └→ call_model -> route_after_model()
                                                   ├→ no tool calls -> END
                                                   └→ propose_actions -> summarize -> END
"""

from functools import partial

from langgraph.graph import END, StateGraph

from trip_assistant.agent.nodes import (
    call_model_node,
    classify_turn_node,
    deterministic_reply_node,
    propose_actions_node,
    route_after_classify,
    route_after_model,
    summarize_node,
)
from trip_assistant.agent.schemas import AgentDependencies, AgentState


def create_agent_graph(deps: AgentDependencies):
    """
    Create and compile the LangGraph workflow for one agent turn.

    Args:
        deps: Collaborators bound into every node

    Returns:
        Compiled LangGraph application ready for execution.
    """
    graph = StateGraph(AgentState)

    graph.add_node("classify_turn", partial(classify_turn_node, deps=deps))
    graph.add_node("deterministic_reply", partial(deterministic_reply_node, deps=deps))
    graph.add_node("call_model", partial(call_model_node, deps=deps))
    graph.add_node("propose_actions", partial(propose_actions_node, deps=deps))
    graph.add_node("summarize", partial(summarize_node, deps=deps))

    graph.set_entry_point("classify_turn")
    graph.add_conditional_edges(
        "classify_turn",
        route_after_classify,
        {"deterministic_reply": "deterministic_reply", "call_model": "call_model"},
    )
    graph.add_edge("deterministic_reply", END)
    graph.add_conditional_edges(
        "call_model",
        route_after_model,
        {"propose_actions": "propose_actions", "complete": END},
    )
    graph.add_edge("propose_actions", "summarize")
    graph.add_edge("summarize", END)

    return graph.compile()
