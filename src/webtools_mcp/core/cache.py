"""Instance-level TTL + LRU cache for the web tools.

Provides ``TTLCache`` — a key→value cache bounded by entry count (least
recently used entry is evicted first) whose entries also expire after a
time-to-live.  Each ``ServiceContainer`` owns its own instances, one for
search answers and one for fetched page text, so nothing is shared through
module-level globals.

Expiry is lazy: an expired entry stays in the store until the next ``get`` /
``has`` touches it (or until ``cleanup_expired`` sweeps it).
"""

from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from webtools_mcp.safety.exceptions import ConfigurationError

_MISSING = object()


@dataclass
class CacheEntry:
    """A stored value with its insertion and expiry timestamps."""

    value: Any
    created_at: float
    expires_at: float


class TTLCache:
    """Capacity-bounded LRU cache with per-entry expiry.

    Args:
        ttl: Default time-to-live in seconds, applied when ``set`` is not
            given a positive ``ttl`` of its own.
        max_entries: Maximum number of stored keys (expired-but-not-purged
            entries count too).  When full, the least recently used entry is
            evicted regardless of its expiry.
        clock: Monotonic time source, injectable for tests.

    Raises:
        ConfigurationError: If ``max_entries`` is not positive or ``ttl``
            is negative.
    """

    def __init__(
        self,
        ttl: float = 300,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ConfigurationError(
                f"Cache max_entries must be positive, got {max_entries}",
                metadata={"max_entries": max_entries},
            )
        if ttl < 0:
            raise ConfigurationError(
                f"Cache ttl must not be negative, got {ttl}",
                metadata={"ttl": ttl},
            )
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        # Oldest first; move_to_end / popitem(last=False) are O(1).
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or ``None`` if missing / expired.

        A hit marks the entry most recently used.
        """
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store *value* under *key* as the most recently used entry."""
        effective_ttl = ttl if ttl is not None and ttl > 0 else self._ttl
        with self._lock:
            # Overwrite counts as a fresh insertion, not as growth.
            self._store.pop(key, None)
            if len(self._store) >= self._max_entries:
                self._store.popitem(last=False)
            now = self._clock()
            self._store[key] = CacheEntry(
                value=value, created_at=now, expires_at=now + effective_ttl
            )

    def has(self, key: str) -> bool:
        """Return ``True`` if *key* exists and has not expired.

        Stored ``None`` values count as present.  Like ``get``, a hit marks
        the entry most recently used.
        """
        return self._lookup(key) is not _MISSING

    def delete(self, key: str) -> bool:
        """Remove *key*; return whether an entry was removed."""
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._store.clear()

    def cleanup_expired(self) -> int:
        """Remove expired entries. Returns count of entries removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._store.items() if now > e.expires_at]
            for k in expired:
                del self._store[k]
            return len(expired)

    def stats(self) -> Dict[str, int]:
        """Return ``size`` (including unpurged expired entries) and ``max_size``."""
        with self._lock:
            return {"size": len(self._store), "max_size": self._max_entries}

    @property
    def size(self) -> int:
        """Number of entries (including possibly-expired ones)."""
        return len(self._store)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._store)

    @staticmethod
    def generate_key(primary: str, options: Optional[Dict[str, Any]] = None) -> str:
        """See :func:`generate_key`."""
        return generate_key(primary, options)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return _MISSING
            if self._clock() > entry.expires_at:
                del self._store[key]
                return _MISSING
            self._store.move_to_end(key)
            return entry.value


def generate_key(primary: str, options: Optional[Dict[str, Any]] = None) -> str:
    """Build a cache key from a query or URL plus optional request options.

    The primary string is trimmed and lower-cased so repeated queries match
    regardless of case and surrounding whitespace.  Options are serialised
    in their given order; ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` give
    different keys.
    """
    normalized = primary.strip().lower()
    serialized = json.dumps(options, default=str) if options else ""
    return f"{normalized}:{serialized}"
