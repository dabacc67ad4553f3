"""
Response cache.

Content-addressed store of previous answers keyed by
``sha256(trip_id + ":" + lowercase(trim(question)))``. Entries expire after a
fixed TTL and are deleted lazily on the next read. Cache failures are
logged and treated as a miss (on read) or ignored (on write).
"""

import hashlib
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from trip_assistant.shared.contracts.query import CacheEntry


logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


def generate_query_hash(trip_id: str, question: str) -> str:
    """Hash a trip id and a normalized question into a cache key."""
    normalized = question.lower().strip()
    return hashlib.sha256(f"{trip_id}:{normalized}".encode("utf-8")).hexdigest()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CacheStore(ABC):
    """Key/value backend for cache entries."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryCacheStore(CacheStore):
    """Process-local store (replace with Redis/DB in production)."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class ResponseCache:
    """
    Answer cache shared by deterministic and LLM-derived answers.

    Args:
        store: Backend holding the entries
        ttl: Lifetime of an entry (default: 24 hours)
        clock: Returns the current aware UTC time; injectable for tests
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store if store is not None else InMemoryCacheStore()
        self.ttl = ttl
        self.clock = clock

    def get(self, trip_id: str, question: str) -> Optional[CacheEntry]:
        """
        Look up a cached answer.

        Returns:
            The entry on a hit, None on a miss, an expired entry, or a
            backend failure
        """
        key = generate_query_hash(trip_id, question)
        try:
            entry = self.store.get(key)
            if entry is None:
                return None

            if self.clock() > entry.expires_at:
                logger.info(f"[trip={trip_id}] Cache entry expired, deleting | key={key[:12]}")
                self.store.delete(key)
                return None

            return entry
        except Exception as e:
            logger.warning(f"[trip={trip_id}] Cache read failed, treating as miss: {e}")
            return None

    def put(self, trip_id: str, question: str, answer: str, tokens_used: int) -> None:
        """Write an answer. Failures are logged and never raised."""
        key = generate_query_hash(trip_id, question)
        try:
            now = self.clock()
            entry = CacheEntry(
                trip_id=trip_id,
                question_hash=key,
                answer=answer,
                tokens_used=tokens_used,
                created_at=now,
                expires_at=now + self.ttl,
            )
            self.store.set(key, entry)
        except Exception as e:
            logger.warning(f"[trip={trip_id}] Cache write failed: {e}")
