"""Graph construction for the query resolver."""

from trip_assistant.query.graph.build import create_query_graph

__all__ = ["create_query_graph"]
