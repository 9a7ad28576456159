"""
In-memory TTL cache for aggregation results, keyed by lower-cased org name.

An entry is fresh while `now - created < ttl`. Fresh hits never touch the
stored timestamp or value. Misses recompute and replace the whole entry.
The map is bounded; the least recently used entry is evicted first.

Two concurrent misses for the same key both compute and the last writer
wins. compute_fn always runs outside the lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Tuple

logger = logging.getLogger(__name__)


class ResultCache:
    def __init__(self, ttl_seconds: float = 300, max_entries: int = 256, clock: Callable[[], float] = time.time):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_compute(self, key: str, compute_fn: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                ts, value = cached
                if now - ts < self.ttl_seconds:
                    self._entries.move_to_end(key)
                    logger.debug("cache hit for %s (age %.1fs)", key, now - ts)
                    return value

        logger.debug("cache miss for %s", key)
        value = compute_fn()

        with self._lock:
            self._entries[key] = (now, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("evicted %s from cache", evicted)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
