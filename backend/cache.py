"""Crime Report Heatmap — In-memory TTL cache for fetched report sets"""

import time
import logging
from collections import OrderedDict
from typing import Any, Optional

from config import REPORT_CACHE_TTL

logger = logging.getLogger("crimewatch.cache")


class TTLCache:
    """Per-key TTL cache; once full, the least recently stored key is dropped."""

    def __init__(self, default_ttl: int = 60, max_size: int = 256):
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._default_ttl = default_ttl
        self._max_size = max_size

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None):
        if key in self._store:
            del self._store[key]
        elif len(self._store) >= self._max_size:
            self.evict_expired()
            while len(self._store) >= self._max_size:
                dropped, _ = self._store.popitem(last=False)
                logger.debug(f"Cache full, dropped {dropped[:40]}")
        ttl = self._default_ttl if ttl is None else ttl
        self._store[key] = (value, time.monotonic() + ttl)

    def clear(self):
        self._store.clear()

    def evict_expired(self):
        now = time.monotonic()
        expired = [k for k, (_, exp) in self._store.items() if now >= exp]
        for k in expired:
            del self._store[k]


# Verified reports per filter signature; short TTL so moderation shows up quickly
report_cache = TTLCache(default_ttl=REPORT_CACHE_TTL)
