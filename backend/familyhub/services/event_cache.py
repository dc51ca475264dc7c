"""Per-viewer calendar event cache.

Holds the last reconciled set of stored events for a viewer so the calendar
still renders when the event store is unreachable. Swappable for Redis.
"""
from __future__ import annotations
from typing import Protocol, Optional, Dict, Any, List, Callable
import json
import time

from ..domain.calendar import CalendarEvent


class EventCache(Protocol):
    def get(self, viewer_id: str) -> Optional[List[CalendarEvent]]: ...
    def put(self, viewer_id: str, events: List[CalendarEvent]) -> None: ...
    def invalidate(self, viewer_id: Optional[str] = None) -> None: ...
    def size(self) -> int: ...


class MemoryEventCache:
    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 500, time_provider: Optional[Callable[[], float]] = None):
        self._data: Dict[str, Dict[str, Any]] = {}
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.time_provider = time_provider or time.time

    def get(self, viewer_id: str) -> Optional[List[CalendarEvent]]:
        self.prune()
        entry = self._data.get(viewer_id)
        if entry is None:
            return None
        return [CalendarEvent.from_dict(e) for e in entry["events"]]

    def put(self, viewer_id: str, events: List[CalendarEvent]) -> None:
        self._data[viewer_id] = {
            "events": [e.to_dict() for e in events],
            "created_at": self.time_provider(),
        }
        self.prune()

    def invalidate(self, viewer_id: Optional[str] = None) -> None:
        if viewer_id is None:
            self._data.clear()
        else:
            self._data.pop(viewer_id, None)

    def prune(self) -> None:
        now_ts = self.time_provider()
        # Expiry
        expired = [k for k, v in self._data.items() if now_ts - v["created_at"] > self.ttl_seconds]
        for k in expired:
            self._data.pop(k, None)
        # Enforce cap
        while len(self._data) > self.max_entries:
            oldest_key = min(self._data.items(), key=lambda kv: kv[1]["created_at"])[0]
            self._data.pop(oldest_key, None)

    def size(self) -> int:
        return len(self._data)


class RedisEventCache:
    """Redis-backed implementation.

    Key layout:
      fh:calendar:events:<viewer_id> -> JSON list of events (TTL applied)
    """
    KEY_PREFIX = "fh:calendar:events:"

    def __init__(self, redis_client, ttl_seconds: int = 3600):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def get(self, viewer_id: str) -> Optional[List[CalendarEvent]]:
        raw = self.redis.get(self.KEY_PREFIX + viewer_id)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return [CalendarEvent.from_dict(e) for e in json.loads(raw)]

    def put(self, viewer_id: str, events: List[CalendarEvent]) -> None:
        payload = json.dumps([e.to_dict() for e in events])
        self.redis.set(self.KEY_PREFIX + viewer_id, payload, ex=self.ttl_seconds)

    def invalidate(self, viewer_id: Optional[str] = None) -> None:
        if viewer_id is not None:
            self.redis.delete(self.KEY_PREFIX + viewer_id)
            return
        keys = list(self.redis.scan_iter(match=self.KEY_PREFIX + "*"))
        if keys:
            self.redis.delete(*keys)

    def size(self) -> int:
        return sum(1 for _ in self.redis.scan_iter(match=self.KEY_PREFIX + "*"))
