"""
Client-side data cache.

Named slots hold the last fetched payload and when it was fetched. Writes
replace the slot (last write wins); nothing expires unless a TTL is given or
the slot is invalidated by hand.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

TASKS = "tasks"
LISTS = "lists"
USER_PROFILE = "userProfile"
PRIZES = "prizes"

SLOTS = (TASKS, LISTS, USER_PROFILE, PRIZES)

PROFILE_TTL_SECONDS = 2 * 60


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float


@dataclass
class DataCache:
    clock: Callable[[], float] = time.time
    entries: Dict[str, CacheEntry] = field(default_factory=dict)

    def set(self, key: str, data: Any) -> None:
        self.entries[key] = CacheEntry(data=data, fetched_at=self.clock())

    def is_cached(self, key: str, ttl: Optional[float] = None) -> bool:
        entry = self.entries.get(key)
        if entry is None or entry.data is None:
            return False
        if ttl is not None and self.clock() - entry.fetched_at >= ttl:
            return False
        return True

    def get(self, key: str, ttl: Optional[float] = None) -> Any:
        if not self.is_cached(key, ttl):
            return None
        return self.entries[key].data

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one slot, or everything when ``key`` is None or "all"."""
        if key is None or key == "all":
            self.entries.clear()
            return
        self.entries.pop(key, None)

    def clear(self) -> None:
        self.entries.clear()
