"""Graph construction for the agent orchestrator."""

from trip_assistant.agent.graph.build import create_agent_graph

__all__ = ["create_agent_graph"]
