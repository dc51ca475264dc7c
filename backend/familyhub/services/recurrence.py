"""Expansion of recurring calendar events into concrete occurrences."""
from __future__ import annotations
from datetime import datetime
from typing import List

from dateutil import rrule as du_rrule

from ..domain.calendar import CalendarEvent, ensure_utc
from ..domain.enums import RecurrenceFrequency

_FREQ = {
    RecurrenceFrequency.DAILY: du_rrule.DAILY,
    RecurrenceFrequency.WEEKLY: du_rrule.WEEKLY,
    RecurrenceFrequency.MONTHLY: du_rrule.MONTHLY,
    RecurrenceFrequency.YEARLY: du_rrule.YEARLY,
}


def build_rule(event: CalendarEvent) -> du_rrule.rrule:
    rule = event.rrule
    kwargs = {
        "dtstart": event.start,
        "interval": rule.interval or 1,
    }
    if rule.byweekday:
        kwargs["byweekday"] = [du_rrule.weekday(d % 7) for d in rule.byweekday]
    if rule.bymonth is not None:
        kwargs["bymonth"] = rule.bymonth
    if rule.bymonthday is not None:
        kwargs["bymonthday"] = rule.bymonthday
    if rule.until is not None:
        kwargs["until"] = rule.until
    return du_rrule.rrule(_FREQ[rule.freq], **kwargs)


def expand_occurrences(event: CalendarEvent, window_start: datetime, window_end: datetime) -> List[CalendarEvent]:
    """Concrete occurrences of ``event`` with start inside [window_start, window_end]."""
    window_start = ensure_utc(window_start)
    window_end = ensure_utc(window_end)
    if event.rrule is None:
        if window_start <= event.start <= window_end:
            return [event]
        return []

    duration = event.end - event.start if event.end else None
    occurrences = []
    for start in build_rule(event).between(window_start, window_end, inc=True):
        occurrences.append(event.with_changes(
            id=f"{event.id}:{start:%Y%m%d}",
            start=start,
            end=start + duration if duration is not None else None,
            rrule=None,
            extra={**event.extra, "recurring_event_id": event.id},
        ))
    return occurrences


def expand_all(events: List[CalendarEvent], window_start: datetime, window_end: datetime) -> List[CalendarEvent]:
    expanded: List[CalendarEvent] = []
    for event in events:
        expanded.extend(expand_occurrences(event, window_start, window_end))
    return sorted(expanded, key=lambda e: (e.start, e.id))
