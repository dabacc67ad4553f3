"""
Itinerary generator.

Produces placeholder events from a free-text trip description, either
streamed one event at a time or in a single JSON-mode call.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union

from trip_assistant.events.normalizer import normalize_event
from trip_assistant.generation.config import DEFAULT_CONFIG, GenerationConfig
from trip_assistant.generation.lean import to_placeholder_event
from trip_assistant.generation.prompts import build_system_prompt, build_user_prompt
from trip_assistant.generation.scanner import EventStreamExtractor
from trip_assistant.shared.contracts.agent import GenerateItineraryResponse, GenerationSummary
from trip_assistant.shared.contracts.events import Event
from trip_assistant.shared.errors import ParseError, UpstreamCallError, ValidationError
from trip_assistant.shared.llm.client import LLMClient
from trip_assistant.shared.logging.telemetry import calculate_cost
from trip_assistant.shared.parsing import parse_json_response


logger = logging.getLogger(__name__)

DateInput = Union[str, datetime]

TRUNCATED_MESSAGE = (
    "Generated itinerary was too long and got truncated. "
    "Try a shorter trip or simpler description."
)


def build_reply(event_count: int, trip_name: str) -> str:
    return (
        f'I\'ve generated {event_count} events for your "{trip_name}" trip. '
        "Review them below and make any changes you'd like!"
    )


class ItineraryGenerator:
    """
    Generates placeholder itineraries.

    Args:
        llm: Chat client with streaming support
        config: Model settings and request limits
    """

    def __init__(self, llm: LLMClient, config: GenerationConfig = DEFAULT_CONFIG):
        self.llm = llm
        self.config = config

    def validate_request(
        self,
        trip_name: Any,
        start_date: Any,
        end_date: Any,
        description: Any,
    ) -> None:
        """
        Check a generation request before any LLM work.

        Raises:
            ValidationError: Missing name, dates or description, or a
                description over max_description_length
        """
        if not trip_name or not isinstance(trip_name, str):
            raise ValidationError("Trip name is required")
        if not start_date or not end_date:
            raise ValidationError("Start and end dates are required")
        if not description or not isinstance(description, str):
            raise ValidationError("Trip description is required")
        limit = self.config.max_description_length
        if len(description) > limit:
            raise ValidationError(f"Trip description too long (max {limit} characters)")

    def _messages(self, trip_name, start_date, end_date, description):
        return [
            {"role": "system", "content": build_system_prompt(self.config.max_events)},
            {
                "role": "user",
                "content": build_user_prompt(trip_name, start_date, end_date, description),
            },
        ]

    def stream_itinerary(
        self,
        trip_name: str,
        start_date: DateInput,
        end_date: DateInput,
        description: str,
    ) -> Iterator[Tuple[str, Any]]:
        """
        Stream an itinerary.

        Yields:
            ``("event", Event)`` for each event as soon as it is complete,
            then exactly one ``("done", GenerationSummary)``

        Raises:
            ValidationError: If the request is invalid (before anything is yielded)
            UpstreamCallError: If the stream fails; events already yielded stand
        """
        self.validate_request(trip_name, start_date, end_date, description)

        config = self.config
        _log = f"[trip_name={trip_name}] [graph=generation] [node=stream] "
        start_time = time.perf_counter()
        extractor = EventStreamExtractor()
        prompt_tokens = 0
        completion_tokens = 0

        logger.info(f"{_log}Starting streamed generation | model={config.model}")
        try:
            for chunk in self.llm.stream(
                self._messages(trip_name, start_date, end_date, description),
                model=config.model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            ):
                if chunk.text:
                    for event in extractor.feed(chunk.text):
                        yield "event", event
                if chunk.prompt_tokens is not None:
                    prompt_tokens = chunk.prompt_tokens
                    completion_tokens = chunk.completion_tokens or 0
        except Exception as e:
            logger.exception(f"{_log}Stream failed after {extractor.event_count} events: {e}")
            raise UpstreamCallError(f"Streaming itinerary generation failed: {e}") from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"{_log}Stream complete | events={extractor.event_count}, "
            f"skipped={extractor.skipped_count}, latency={latency_ms}ms"
        )

        yield "done", GenerationSummary(
            reply=build_reply(extractor.event_count, trip_name),
            event_count=extractor.event_count,
            tokens_used=prompt_tokens + completion_tokens,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            estimated_cost_usd=calculate_cost(config.model, prompt_tokens, completion_tokens),
            latency_ms=latency_ms,
        )

    def generate(
        self,
        trip_name: str,
        start_date: DateInput,
        end_date: DateInput,
        description: str,
        on_event: Optional[Callable[[Event], None]] = None,
    ) -> GenerationSummary:
        """
        Stream an itinerary through a callback.

        Args:
            on_event: Called once per event, in stream order

        Returns:
            Summary with event count and aggregate token/cost figures
        """
        summary: Optional[GenerationSummary] = None
        for kind, payload in self.stream_itinerary(trip_name, start_date, end_date, description):
            if kind == "event":
                if on_event is not None:
                    on_event(payload)
            else:
                summary = payload
        return summary

    def generate_all(
        self,
        trip_name: str,
        start_date: DateInput,
        end_date: DateInput,
        description: str,
    ) -> GenerateItineraryResponse:
        """
        Generate a whole itinerary in one JSON-mode call.

        Accepts ``{"events": [...]}``, ``{"itinerary": [...]}`` or a bare array.

        Raises:
            ValidationError: If the request is invalid
            UpstreamCallError: If the call fails, is truncated, or returns
                unparseable JSON
        """
        self.validate_request(trip_name, start_date, end_date, description)

        config = self.config
        _log = f"[trip_name={trip_name}] [graph=generation] [node=generate_all] "
        start_time = time.perf_counter()

        try:
            result = self.llm.complete(
                self._messages(trip_name, start_date, end_date, description),
                model=config.model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.exception(f"{_log}LLM call failed: {e}")
            raise UpstreamCallError(f"Itinerary generation failed: {e}") from e

        if result.finish_reason == "length":
            logger.error(f"{_log}Generation truncated | completion_tokens={result.completion_tokens}")
            raise UpstreamCallError(f"Itinerary generation failed: {TRUNCATED_MESSAGE}")

        try:
            parsed = parse_json_response(result.content or "{}")
        except ParseError as e:
            logger.error(f"{_log}Failed to parse itinerary | content={(result.content or '')[:500]}")
            raise UpstreamCallError("Itinerary generation failed: Failed to parse generated itinerary") from e

        if isinstance(parsed, dict):
            raw_events = parsed.get("events") or parsed.get("itinerary") or []
        else:
            raw_events = parsed
        if not isinstance(raw_events, list):
            raise UpstreamCallError("Itinerary generation failed: Failed to parse generated itinerary")

        events: List[Event] = [
            normalize_event(to_placeholder_event(raw)) for raw in raw_events if isinstance(raw, dict)
        ]

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(f"{_log}Generated itinerary | events={len(events)}, latency={latency_ms}ms")

        return GenerateItineraryResponse(
            events=events,
            reply=build_reply(len(events), trip_name),
            tokens_used=result.total_tokens,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
            estimated_cost_usd=calculate_cost(config.model, result.prompt_tokens, result.completion_tokens),
            latency_ms=latency_ms,
        )
