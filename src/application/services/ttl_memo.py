"""Process-wide, time-bounded memo for cheap dashboard reads."""
import threading
import time
from collections.abc import Callable
from typing import Any

from src.config import settings

_MISSING = object()


class TTLMemo:
    """Caches values per key for ``ttl_seconds``; writers call ``invalidate``."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self._ttl, value)

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


PENDING_COUNT_KEY = "product_requests:pending_count"

request_stats_memo = TTLMemo(ttl_seconds=settings.pending_count_cache_ttl_seconds)
