"""Calendar event reconciliation.

Three sources feed the calendar: stored (remote) events, the per-viewer event
cache and events generated from member birthdays / death dates. They are merged
by id, filtered down to what the viewer's family group may see and given
category colours.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from ..domain.calendar import CalendarEvent
from ..domain.enums import EventCategory, FamilyGroup
from .family_groups import explicit_family_group, is_demo_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventPalette:
    background_color: str
    border_color: str
    text_color: str


CATEGORY_PALETTES: Dict[str, EventPalette] = {
    EventCategory.BIRTHDAY.value: EventPalette("#F4C47A", "#EA9010", "#000000"),
    EventCategory.HOLIDAY.value: EventPalette("#A7F3D0", "#059669", "#000000"),
    EventCategory.FAMILY_EVENT.value: EventPalette("#BFDBFE", "#2563EB", "#000000"),
    EventCategory.APPOINTMENT.value: EventPalette("#E9D5FF", "#7C3AED", "#000000"),
    EventCategory.MEMORIAL.value: EventPalette("#D1D5DB", "#4B5563", "#000000"),
}
DEFAULT_PALETTE = EventPalette("#3788D8", "#3788D8", "#FFFFFF")


def merge_event_sources(
    remote: Iterable[CalendarEvent],
    cached: Iterable[CalendarEvent],
    generated: Iterable[CalendarEvent],
) -> List[CalendarEvent]:
    """Union by id. Later sources win: cache < remote < generated."""
    merged: Dict[str, CalendarEvent] = {}
    for source in (cached, remote, generated):
        for event in source:
            if not event.id:
                continue
            merged[event.id] = event
    return list(merged.values())


def is_visible_to_viewer(event: CalendarEvent, viewer_group: str, family_member_ids: Set[str]) -> bool:
    if not event.user_id:
        # system / generated event
        return True
    if is_demo_user(event.user_id):
        return viewer_group == FamilyGroup.DEMO.value
    tag = explicit_family_group(event.family_group)
    if tag is not None:
        return tag == viewer_group
    if event.user_id in family_member_ids:
        return True
    logger.debug("Excluding event %s: family group of owner %s undetermined", event.id, event.user_id)
    return False


def normalize_event_colors(event: CalendarEvent) -> CalendarEvent:
    palette = CATEGORY_PALETTES.get(event.category or "")
    if palette is None:
        return event.with_changes(
            background_color=event.background_color or DEFAULT_PALETTE.background_color,
            border_color=event.border_color or DEFAULT_PALETTE.border_color,
            text_color=event.text_color or DEFAULT_PALETTE.text_color,
        )
    return event.with_changes(
        background_color=palette.background_color,
        border_color=palette.border_color,
        text_color=palette.text_color,
    )


def reconcile_events(
    remote: Iterable[CalendarEvent],
    cached: Iterable[CalendarEvent],
    generated: Iterable[CalendarEvent],
    viewer_group: str,
    family_member_ids: Optional[Set[str]] = None,
) -> List[CalendarEvent]:
    member_ids = family_member_ids or set()
    merged = merge_event_sources(remote, cached, generated)
    visible = [e for e in merged if is_visible_to_viewer(e, viewer_group, member_ids)]
    if len(visible) != len(merged):
        logger.debug("Filtered %d of %d events for %s viewer", len(merged) - len(visible), len(merged), viewer_group)
    normalized = [normalize_event_colors(e) for e in visible]
    return sorted(normalized, key=lambda e: (e.start, e.id))
