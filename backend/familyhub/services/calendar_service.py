"""Calendar load pipeline.

Stored events, the viewer's cached events and generated member events are
reconciled into the list a viewer sees. A failing event store degrades to the
cache; nothing is retried.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import config
from ..domain.calendar import CalendarEvent
from ..metrics import CALENDAR_LOAD_COUNT, CALENDAR_LOAD_DURATION, REMOTE_FETCH_FAILURES
from ..repositories.event_repository import EventRepository, SqlAlchemyEventRepository
from . import member_service
from .calendar_merge import reconcile_events
from .event_cache import EventCache, MemoryEventCache
from .event_generator import generate_member_events
from .family_groups import get_user_family_group
from .recurrence import expand_all

logger = logging.getLogger(__name__)

_default_cache: Optional[EventCache] = None


def get_event_cache() -> EventCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = MemoryEventCache(
            ttl_seconds=config.EVENT_CACHE_TTL_SECONDS,
            max_entries=config.EVENT_CACHE_MAX_ENTRIES,
        )
    return _default_cache


def set_event_cache(cache: Optional[EventCache]):
    global _default_cache
    _default_cache = cache


@dataclass
class CalendarView:
    viewer_group: str
    events: List[CalendarEvent] = field(default_factory=list)
    remote_available: bool = True
    cached_count: int = 0
    generated_count: int = 0


class CalendarService:
    def __init__(self, repository: EventRepository | None = None, cache: EventCache | None = None):
        self.repo = repository or SqlAlchemyEventRepository()
        self.cache = cache if cache is not None else get_event_cache()

    def _fetch_remote(self, db: Session) -> Optional[List[CalendarEvent]]:
        try:
            return [CalendarEvent.from_model(e) for e in self.repo.list_all(db)]
        except Exception:
            logger.exception("Fetching stored events failed; continuing with cached events only")
            REMOTE_FETCH_FAILURES.inc()
            db.rollback()
            return None

    def _read_cache(self, viewer_id: str) -> List[CalendarEvent]:
        try:
            return self.cache.get(viewer_id) or []
        except Exception:
            logger.debug("Event cache read failed for %s", viewer_id, exc_info=True)
            return []

    def _write_cache(self, viewer_id: str, events: List[CalendarEvent]):
        try:
            self.cache.put(viewer_id, events)
        except Exception:
            logger.warning("Event cache write failed for %s", viewer_id, exc_info=True)

    def load_calendar(
        self,
        db: Session,
        viewer_id: str,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> CalendarView:
        viewer_group = get_user_family_group(viewer_id)
        CALENDAR_LOAD_COUNT.labels(family_group=viewer_group).inc()
        with CALENDAR_LOAD_DURATION.time():
            members = member_service.list_members(db, viewer_id)
            member_ids = member_service.family_member_ids(members)

            remote = self._fetch_remote(db)
            cached = self._read_cache(viewer_id)
            # anchor anniversaries at the window start so expansion covers the whole window
            anchor = window_start.date() if window_start is not None and today is None else today
            generated = generate_member_events(members, anchor)

            events = reconcile_events(remote or [], cached, generated, viewer_group, member_ids)

            if remote is not None:
                generated_ids = {e.id for e in generated}
                self._write_cache(viewer_id, [e for e in events if e.id not in generated_ids])

            if window_start is not None and window_end is not None:
                events = expand_all(events, window_start, window_end)

        logger.debug(
            "Calendar for %s (%s): %d events, %d cached, %d generated",
            viewer_id, viewer_group, len(events), len(cached), len(generated),
        )
        return CalendarView(
            viewer_group=viewer_group,
            events=events,
            remote_available=remote is not None,
            cached_count=len(cached),
            generated_count=len(generated),
        )
