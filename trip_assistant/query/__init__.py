"""
Query resolver for trip questions.

Answers questions from the cache, a deterministic aggregate function, or
the LLM, in that order.
"""

from trip_assistant.query.classifier import Classification, classify_query
from trip_assistant.query.config import QueryGraphConfig
from trip_assistant.query.resolver import QueryResolver

__all__ = ["Classification", "classify_query", "QueryGraphConfig", "QueryResolver"]
