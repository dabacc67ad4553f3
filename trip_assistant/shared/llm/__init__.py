"""LLM client utilities."""

from trip_assistant.shared.llm.client import (
    LLMClient,
    LLMResult,
    StreamChunk,
    ToolCall,
    create_openai_client,
)

__all__ = ["LLMClient", "LLMResult", "StreamChunk", "ToolCall", "create_openai_client"]
