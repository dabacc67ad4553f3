"""
Graph construction for the query resolver.

The graph structure is:
    Entry -> validate -> cache_lookup -> route_after_cache()
                                          ├→ hit -> END
                                          └→ classify -> route_after_classify()
                                                           ├→ deterministic -> END
                                                           └→ build_context -> llm_answer -> END
"""

from functools import partial

from langgraph.graph import END, StateGraph

from trip_assistant.query.nodes import (
    build_context_node,
    cache_lookup_node,
    classify_node,
    deterministic_node,
    llm_answer_node,
    route_after_cache,
    route_after_classify,
    validate_node,
)
from trip_assistant.query.schemas import QueryDependencies, QueryState


def create_query_graph(deps: QueryDependencies):
    """
    Create and compile the LangGraph workflow for a single question.

    Args:
        deps: Collaborators bound into every node

    Returns:
        Compiled LangGraph application ready for execution.
    """
    graph = StateGraph(QueryState)

    graph.add_node("validate", partial(validate_node, deps=deps))
    graph.add_node("cache_lookup", partial(cache_lookup_node, deps=deps))
    graph.add_node("classify", partial(classify_node, deps=deps))
    graph.add_node("deterministic", partial(deterministic_node, deps=deps))
    graph.add_node("build_context", partial(build_context_node, deps=deps))
    graph.add_node("llm_answer", partial(llm_answer_node, deps=deps))

    graph.set_entry_point("validate")
    graph.add_edge("validate", "cache_lookup")
    graph.add_conditional_edges(
        "cache_lookup",
        route_after_cache,
        {"classify": "classify", "complete": END},
    )
    graph.add_conditional_edges(
        "classify",
        route_after_classify,
        {"deterministic": "deterministic", "build_context": "build_context"},
    )
    graph.add_edge("deterministic", END)
    graph.add_edge("build_context", "llm_answer")
    graph.add_edge("llm_answer", END)

    return graph.compile()
