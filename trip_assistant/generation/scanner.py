"""
Incremental event extractor for streamed itinerary JSON.

The model streams a JSON object with an ``events`` array in arbitrary
chunks. The scanner is a finite-state machine over characters that finds
each complete top-level object inside the first array, so every event can
be handed to the caller as soon as its closing brace arrives.

String contents are inert: braces and brackets inside a JSON string never
affect depth, and an escaped quote never ends the string.
"""

import json
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from trip_assistant.events.normalizer import normalize_event
from trip_assistant.generation.lean import to_placeholder_event
from trip_assistant.shared.contracts.events import Event


logger = logging.getLogger(__name__)


class ScanState(Enum):
    """Lexical position of the scanner."""

    OUTSIDE = "outside"
    IN_ARRAY = "in_array"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


@dataclass(frozen=True)
class ScannerState:
    """
    Full scanner state between characters.

    Attributes:
        state: Lexical position
        array_seen: True once the first structural ``[`` has been consumed
        depth: Brace depth inside the events array (never negative)
        object_start: Buffer index of the ``{`` opening the current event, or -1
    """

    state: ScanState = ScanState.OUTSIDE
    array_seen: bool = False
    depth: int = 0
    object_start: int = -1


INITIAL_STATE = ScannerState()

Span = Tuple[int, int]


def _structural_state(s: ScannerState) -> ScanState:
    return ScanState.IN_ARRAY if s.array_seen else ScanState.OUTSIDE


def transition(s: ScannerState, ch: str, index: int) -> Tuple[ScannerState, Optional[Span]]:
    """
    Advance the scanner by one character.

    Args:
        s: State before the character
        ch: The character
        index: Position of the character in the running buffer

    Returns:
        The next state and, when ch closes a top-level event object, the
        ``(start, end)`` slice of that object (end exclusive)
    """
    if s.state is ScanState.ESCAPED:
        return replace(s, state=ScanState.IN_STRING), None

    if s.state is ScanState.IN_STRING:
        if ch == "\\":
            return replace(s, state=ScanState.ESCAPED), None
        if ch == '"':
            return replace(s, state=_structural_state(s)), None
        return s, None

    if ch == '"':
        return replace(s, state=ScanState.IN_STRING), None

    if s.state is ScanState.OUTSIDE:
        if ch == "[":
            return replace(s, state=ScanState.IN_ARRAY, array_seen=True), None
        return s, None

    # IN_ARRAY
    if ch == "{":
        if s.depth == 0:
            return replace(s, depth=1, object_start=index), None
        return replace(s, depth=s.depth + 1), None

    if ch == "}":
        if s.depth == 0:
            return s, None
        depth = s.depth - 1
        if depth == 0 and s.object_start >= 0:
            return replace(s, depth=0, object_start=-1), (s.object_start, index + 1)
        return replace(s, depth=depth), None

    return s, None


class EventStreamExtractor:
    """
    Feeds streamed text through the scanner and emits canonical events.

    Each completed object is parsed, expanded from the lean schema, given a
    placeholder id, normalized, and passed to ``on_event``. Objects that
    fail to parse are logged and skipped.

    Args:
        on_event: Called once per emitted event, in stream order
    """

    def __init__(self, on_event: Optional[Callable[[Event], None]] = None):
        self.on_event = on_event
        self.scanner = INITIAL_STATE
        self.buffer = ""
        self.offset = 0  # absolute position of buffer[0] in the stream
        self.event_count = 0
        self.skipped_count = 0

    def feed(self, chunk: str) -> List[Event]:
        """
        Consume one chunk of model output.

        Returns:
            Events completed by this chunk, in order
        """
        start = self.offset + len(self.buffer)
        self.buffer += chunk
        emitted: List[Event] = []

        for i, ch in enumerate(chunk, start=start):
            self.scanner, span = transition(self.scanner, ch, i)
            if span is None:
                continue

            text = self.buffer[span[0] - self.offset : span[1] - self.offset]
            event = self._parse(text)
            if event is not None:
                emitted.append(event)

        self._trim()
        return emitted

    def _parse(self, text: str) -> Optional[Event]:
        try:
            raw: Dict[str, Any] = json.loads(text)
        except json.JSONDecodeError as e:
            self.skipped_count += 1
            logger.warning(f"[graph=generation] Skipping malformed streamed event: {e}")
            return None

        if not isinstance(raw, dict):
            self.skipped_count += 1
            logger.warning("[graph=generation] Skipping streamed value that is not an object")
            return None

        try:
            event = normalize_event(to_placeholder_event(raw))
        except Exception as e:
            self.skipped_count += 1
            logger.warning(f"[graph=generation] Skipping streamed event that failed to normalize: {e}")
            return None

        self.event_count += 1
        if self.on_event is not None:
            self.on_event(event)
        return event

    def _trim(self) -> None:
        # Keep text from the open object onward; everything before it is consumed.
        keep_from = self.scanner.object_start
        if keep_from < 0:
            keep_from = self.offset + len(self.buffer)
        drop = keep_from - self.offset
        if drop > 0:
            self.buffer = self.buffer[drop:]
            self.offset = keep_from
