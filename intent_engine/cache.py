"""
Response cache keyed by normalized query
"""

import re
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple


def normalize_query(query: Optional[str]) -> str:
    """Lower-case and collapse whitespace"""
    return re.sub(r"\s+", " ", (query or "").strip().lower())


class ResultCache:
    """
    Bounded TTL cache. Entries expire after ttl_seconds; past max_entries the
    oldest-inserted entry is evicted.
    """

    def __init__(self, max_entries: int = 100, ttl_seconds: float = 1800,
                 clock: Optional[Callable[[], float]] = None):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock or time.monotonic
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, query: str) -> Optional[Any]:
        key = normalize_query(query)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self.clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, query: str, value: Any) -> None:
        key = normalize_query(query)
        with self._lock:
            # Re-storing counts as a fresh insertion
            self._entries.pop(key, None)
            self._entries[key] = (self.clock(), value)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: str) -> bool:
        return self.get(query) is not None
