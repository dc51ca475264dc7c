"""Calendar event value objects shared by the merge pipeline and the cache."""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .enums import RecurrenceFrequency


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


@dataclass(frozen=True)
class RecurrenceRule:
    freq: RecurrenceFrequency = RecurrenceFrequency.YEARLY
    interval: Optional[int] = None
    byweekday: Optional[List[int]] = None  # 0=Monday .. 6=Sunday
    bymonth: Optional[int] = None
    bymonthday: Optional[int] = None  # negative counts from month end
    until: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"freq": self.freq.value}
        if self.interval is not None:
            data["interval"] = self.interval
        if self.byweekday:
            data["byweekday"] = list(self.byweekday)
        if self.bymonth is not None:
            data["bymonth"] = self.bymonth
        if self.bymonthday is not None:
            data["bymonthday"] = self.bymonthday
        if self.until is not None:
            data["until"] = self.until.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["RecurrenceRule"]:
        if not data:
            return None
        return cls(
            freq=RecurrenceFrequency(data.get("freq") or RecurrenceFrequency.YEARLY.value),
            interval=int(data["interval"]) if data.get("interval") is not None else None,
            byweekday=[int(d) for d in data["byweekday"]] if data.get("byweekday") else None,
            bymonth=int(data["bymonth"]) if data.get("bymonth") is not None else None,
            bymonthday=int(data["bymonthday"]) if data.get("bymonthday") is not None else None,
            until=parse_datetime(data.get("until")),
        )


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    title: str
    start: datetime
    end: Optional[datetime] = None
    all_day: bool = False
    background_color: Optional[str] = None
    border_color: Optional[str] = None
    text_color: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    user_id: Optional[str] = None
    created_by: Optional[str] = None
    family_group: Optional[str] = None
    category: Optional[str] = None
    rrule: Optional[RecurrenceRule] = None
    member_id: Optional[str] = None  # source member of a generated event
    extra: Dict[str, Any] = field(default_factory=dict)

    def with_changes(self, **changes: Any) -> "CalendarEvent":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat() if self.end else None
        data["rrule"] = self.rrule.to_dict() if self.rrule else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            start=parse_datetime(data.get("start")),
            end=parse_datetime(data.get("end")),
            all_day=bool(data.get("all_day", False)),
            background_color=data.get("background_color"),
            border_color=data.get("border_color"),
            text_color=data.get("text_color"),
            location=data.get("location"),
            description=data.get("description"),
            user_id=data.get("user_id"),
            created_by=data.get("created_by"),
            family_group=data.get("family_group"),
            category=data.get("category"),
            rrule=RecurrenceRule.from_dict(data.get("rrule")),
            member_id=data.get("member_id"),
            extra=dict(data.get("extra") or {}),
        )

    @classmethod
    def from_model(cls, event) -> "CalendarEvent":
        return cls(
            id=event.id,
            title=event.title,
            start=ensure_utc(event.start_at),
            end=ensure_utc(event.end_at),
            all_day=bool(event.all_day),
            background_color=event.background_color,
            border_color=event.border_color,
            text_color=event.text_color,
            location=event.location,
            description=event.description,
            user_id=event.user_id or None,
            created_by=event.created_by,
            family_group=event.family_group,
            category=event.category,
            rrule=RecurrenceRule.from_dict(event.rrule),
        )
