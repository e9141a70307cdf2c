from __future__ import annotations

import logging
import time
from typing import Callable

from portfolio_quotes.schemas.quote import Quote

logger = logging.getLogger(__name__)


class QuoteCache:
    """Short-lived quote cache keyed by ``"{family}:{SYMBOL}"``.

    Entries expire ``ttl_sec`` after insertion. Two concurrent misses for the
    same key may both fetch; the later ``put`` simply wins.
    """

    def __init__(self, ttl_sec: float = 60, clock: Callable[[], float] | None = None) -> None:
        self.ttl_sec = ttl_sec
        self._clock = clock or time.monotonic
        self._rows: dict[str, tuple[Quote, float]] = {}
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl_sec > 0

    def get(self, key: str) -> Quote | None:
        row = self._rows.get(key)
        if row is None:
            self.misses += 1
            return None
        quote, expires_at = row
        if self._clock() >= expires_at:
            self._rows.pop(key, None)
            self.misses += 1
            return None
        self.hits += 1
        return quote

    def put(self, key: str, quote: Quote) -> None:
        if not self.enabled:
            return
        self.prune()
        self._rows[key] = (quote, self._clock() + self.ttl_sec)

    def prune(self) -> int:
        now = self._clock()
        expired = [k for k, (_, until) in self._rows.items() if until <= now]
        for k in expired:
            self._rows.pop(k, None)
        return len(expired)

    def clear(self) -> int:
        count = len(self._rows)
        self._rows.clear()
        logger.info("[CACHE][clear] removed=%s", count)
        return count

    def stats(self) -> dict[str, int | float]:
        self.prune()
        return {
            "entries": len(self._rows),
            "hits": self.hits,
            "misses": self.misses,
            "ttl_sec": self.ttl_sec,
        }
