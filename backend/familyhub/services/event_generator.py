"""Birthday and memorial events derived from family member records."""
from __future__ import annotations
import calendar
import logging
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional

from ..domain.calendar import CalendarEvent, RecurrenceRule
from ..domain.enums import EventCategory, RecurrenceFrequency
from .family_groups import normalize_family_group

logger = logging.getLogger(__name__)

BIRTHDAY_PREFIX = "birthday-"
MEMORIAL_PREFIX = "memorial-"


def display_name(member) -> str:
    if member.use_nick_name and member.nick_name:
        first = member.nick_name
    elif member.use_middle_name and member.middle_name:
        first = member.middle_name
    else:
        first = member.first_name
    return " ".join(p for p in (first, member.last_name) if p)


def parse_member_date(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` with an optional time suffix; None when unusable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.split("T")[0].strip())
    except ValueError:
        return None


def anniversary_in_year(original: date, year: int) -> date:
    day = original.day
    if original.month == 2 and day == 29 and not calendar.isleap(year):
        day = 28
    return date(year, original.month, day)


def next_anniversary(original: date, today: date) -> date:
    this_year = anniversary_in_year(original, today.year)
    if this_year >= today:
        return this_year
    return anniversary_in_year(original, today.year + 1)


def yearly_rule(original: date) -> RecurrenceRule:
    """Yearly recurrence for an anniversary; Feb 29 lands on the last day of February."""
    if original.month == 2 and original.day == 29:
        return RecurrenceRule(freq=RecurrenceFrequency.YEARLY, interval=1, bymonth=2, bymonthday=-1)
    return RecurrenceRule(freq=RecurrenceFrequency.YEARLY, interval=1)


def _all_day_start(day: date) -> datetime:
    return datetime.combine(day, time.min).replace(tzinfo=timezone.utc)


def generate_member_events(members: Iterable, today: Optional[date] = None) -> List[CalendarEvent]:
    today = today or datetime.now(timezone.utc).date()
    events: List[CalendarEvent] = []
    for member in members:
        name = display_name(member)
        group = normalize_family_group(member.family_group)
        if not member.death_date:
            birthday = parse_member_date(member.birthday)
            if birthday is None:
                if member.birthday:
                    logger.debug("Skipping birthday for member %s: unparseable birthday %r", member.id, member.birthday)
            else:
                events.append(CalendarEvent(
                    id=f"{BIRTHDAY_PREFIX}{member.id}",
                    title=f"{name}'s Birthday",
                    start=_all_day_start(next_anniversary(birthday, today)),
                    all_day=True,
                    family_group=group,
                    category=EventCategory.BIRTHDAY.value,
                    rrule=yearly_rule(birthday),
                    member_id=member.id,
                ))
            continue

        death = parse_member_date(member.death_date)
        if death is None:
            logger.debug("Skipping memorial for member %s: unparseable death date %r", member.id, member.death_date)
        else:
            events.append(CalendarEvent(
                id=f"{MEMORIAL_PREFIX}{member.id}",
                title=f"In Memory of {name}",
                start=_all_day_start(next_anniversary(death, today)),
                all_day=True,
                family_group=group,
                category=EventCategory.MEMORIAL.value,
                rrule=yearly_rule(death),
                member_id=member.id,
            ))
    return events
