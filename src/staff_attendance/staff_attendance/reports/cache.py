from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from ..common.datetime_utils import DateLike, month_key, normalize_day_key

logger = logging.getLogger(__name__)

CacheKey = tuple[Optional[int], str]
Generation = tuple[int, int, int]


class StatsCache:
    """In-process cache of aggregated reports keyed by (school_id, period_key).

    Entries are derived data only: a write to the attendance store must be
    followed by ``invalidate`` so the next report is rebuilt from a fresh fetch.

    Every invalidation also bumps a generation for the keys it touches. A
    report built from a fetch that started before a write carries the older
    generation and ``put`` refuses it.
    """

    def __init__(self):
        self._entries: dict[CacheKey, Any] = {}
        self._generations: dict[CacheKey, int] = {}
        # Bumped by school-less invalidations, which reach every school's key.
        self._period_generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()
        self.stats = {"hits": 0, "misses": 0, "sets": 0, "stale_sets": 0, "invalidations": 0}

    def _generation(self, key: CacheKey) -> Generation:
        return self._epoch, self._period_generations.get(key[1], 0), self._generations.get(key, 0)

    def generation(self, school_id: Optional[int], period_key: str) -> Generation:
        """Token to pass back to ``put`` for a report about to be built."""

        with self._lock:
            return self._generation((school_id, period_key))

    def get(self, school_id: Optional[int], period_key: str) -> Optional[Any]:
        with self._lock:
            value = self._entries.get((school_id, period_key))
            self.stats["hits" if value is not None else "misses"] += 1
            return value

    def put(
        self,
        school_id: Optional[int],
        period_key: str,
        value: Any,
        *,
        generation: Optional[Generation] = None,
    ) -> bool:
        """Store ``value``; returns False when a write invalidated the key since ``generation``."""

        key = (school_id, period_key)
        with self._lock:
            if generation is not None and generation != self._generation(key):
                self.stats["stale_sets"] += 1
                return False
            self._entries[key] = value
            self.stats["sets"] += 1
            return True

    def invalidate(self, school_id: Optional[int], work_date: DateLike) -> int:
        """Drop the day and month entries touched by a write on ``work_date``.

        Entries for the all-schools view (school_id None) are dropped as well.
        When ``school_id`` is unknown every school's entries for the period go.
        """

        day_key = normalize_day_key(work_date)
        periods = {day_key, month_key(day_key)}
        with self._lock:
            for period in periods:
                if school_id is None:
                    self._period_generations[period] = self._period_generations.get(period, 0) + 1
                else:
                    for key in ((school_id, period), (None, period)):
                        self._generations[key] = self._generations.get(key, 0) + 1

            doomed = [
                key
                for key in self._entries
                if key[1] in periods and (school_id is None or key[0] in (school_id, None))
            ]
            for key in doomed:
                del self._entries[key]
            self.stats["invalidations"] += len(doomed)

        if doomed:
            logger.debug("Invalidated %d cached report(s) for %s", len(doomed), day_key)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._epoch += 1

    def __len__(self) -> int:
        return len(self._entries)
