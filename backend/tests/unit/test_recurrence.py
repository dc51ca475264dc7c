from datetime import datetime, timedelta, timezone

from familyhub.domain.calendar import CalendarEvent, RecurrenceRule
from familyhub.domain.enums import RecurrenceFrequency
from familyhub.services.recurrence import expand_all, expand_occurrences


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_non_recurring_event_kept_only_inside_window():
    e = CalendarEvent(id="x", title="x", start=utc(2026, 5, 1, 9))
    assert expand_occurrences(e, utc(2026, 5, 1), utc(2026, 5, 2)) == [e]
    assert expand_occurrences(e, utc(2026, 6, 1), utc(2026, 6, 2)) == []


def test_weekly_byweekday_expansion_keeps_duration():
    e = CalendarEvent(
        id="standup",
        title="Standup",
        start=utc(2026, 5, 4, 9),  # Monday
        end=utc(2026, 5, 4, 9, 30),
        rrule=RecurrenceRule(freq=RecurrenceFrequency.WEEKLY, byweekday=[0, 2]),
    )

    occ = expand_occurrences(e, utc(2026, 5, 4), utc(2026, 5, 10, 23, 59))

    assert [o.start for o in occ] == [utc(2026, 5, 4, 9), utc(2026, 5, 6, 9)]
    assert all(o.end - o.start == timedelta(minutes=30) for o in occ)
    assert occ[1].id == "standup:20260506"
    assert occ[1].rrule is None
    assert occ[1].extra["recurring_event_id"] == "standup"


def test_until_and_interval_limit_occurrences():
    e = CalendarEvent(
        id="m",
        title="Monthly",
        start=utc(2026, 1, 10),
        rrule=RecurrenceRule(freq=RecurrenceFrequency.MONTHLY, interval=2, until=utc(2026, 6, 1)),
    )
    occ = expand_occurrences(e, utc(2026, 1, 1), utc(2026, 12, 31))
    assert [o.start.month for o in occ] == [1, 3, 5]


def test_yearly_birthday_expands_across_years():
    e = CalendarEvent(
        id="birthday-m1",
        title="Ann's Birthday",
        start=utc(2026, 3, 15),
        all_day=True,
        rrule=RecurrenceRule(freq=RecurrenceFrequency.YEARLY, interval=1),
    )
    occ = expand_occurrences(e, utc(2026, 1, 1), utc(2028, 12, 31))
    assert [o.start.year for o in occ] == [2026, 2027, 2028]


def test_expand_all_sorted():
    a = CalendarEvent(id="a", title="a", start=utc(2026, 5, 3))
    b = CalendarEvent(id="b", title="b", start=utc(2026, 5, 1), rrule=RecurrenceRule(freq=RecurrenceFrequency.DAILY))
    out = expand_all([a, b], utc(2026, 5, 1), utc(2026, 5, 3))
    assert [o.id for o in out] == ["b:20260501", "b:20260502", "a", "b:20260503"]
