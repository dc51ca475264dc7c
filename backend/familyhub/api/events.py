from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List, Annotated
from ..db.session import get_db
from ..db import models
from ..domain.calendar import CalendarEvent, RecurrenceRule
from ..domain.enums import EventCategory, RecurrenceFrequency, RSVPStatus
from ..services.calendar_service import CalendarService, get_event_cache
from ..services.event_service import EventService, EventNotFound, EventInvalid
from ..services.rsvp_service import RSVPService, RSVPNotFound
from ..errors import ValidationAppError, NotFoundError, ForbiddenError
from .auth import get_viewer

router = APIRouter(prefix="/events", tags=["events"])

Weekday = Annotated[int, Field(ge=0, le=6)]

class RRuleIn(BaseModel):
    freq: RecurrenceFrequency
    interval: Optional[int] = Field(default=None, ge=1)
    byweekday: Optional[List[Weekday]] = None
    until: Optional[datetime] = None

    def to_rule(self) -> RecurrenceRule:
        return RecurrenceRule(freq=self.freq, interval=self.interval, byweekday=self.byweekday, until=self.until)

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    start_at: datetime = Field(..., alias="startAt")
    end_at: Optional[datetime] = Field(None, alias="endAt")
    all_day: bool = Field(default=False, alias="allDay")
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[EventCategory] = None
    rrule: Optional[RRuleIn] = None
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    border_color: Optional[str] = Field(None, alias="borderColor")
    text_color: Optional[str] = Field(None, alias="textColor")

    model_config = ConfigDict(populate_by_name=True)

class EventUpdate(BaseModel):
    title: Optional[str] = None
    start_at: Optional[datetime] = Field(None, alias="startAt")
    end_at: Optional[datetime] = Field(None, alias="endAt")
    all_day: Optional[bool] = Field(None, alias="allDay")
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[EventCategory] = None
    rrule: Optional[RRuleIn] = None
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    border_color: Optional[str] = Field(None, alias="borderColor")
    text_color: Optional[str] = Field(None, alias="textColor")

    model_config = ConfigDict(populate_by_name=True)

class EventOut(BaseModel):
    id: str
    title: str
    start_at: datetime = Field(..., alias="startAt")
    end_at: Optional[datetime] = Field(None, alias="endAt")
    all_day: bool = Field(False, alias="allDay")
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    rrule: Optional[dict] = None
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    border_color: Optional[str] = Field(None, alias="borderColor")
    text_color: Optional[str] = Field(None, alias="textColor")
    user_id: Optional[str] = Field(None, alias="userId")
    created_by: Optional[str] = Field(None, alias="createdBy")
    family_group: Optional[str] = Field(None, alias="familyGroup")
    member_id: Optional[str] = Field(None, alias="memberId")
    recurring_event_id: Optional[str] = Field(None, alias="recurringEventId")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

class CalendarOut(BaseModel):
    family_group: str = Field(..., alias="familyGroup")
    remote_available: bool = Field(..., alias="remoteAvailable")
    events: List[EventOut]

    model_config = ConfigDict(populate_by_name=True)

class RSVPIn(BaseModel):
    status: RSVPStatus

class RSVPOut(BaseModel):
    event_id: str = Field(..., alias="eventId")
    user_id: str = Field(..., alias="userId")
    status: Optional[RSVPStatus] = None

    model_config = ConfigDict(populate_by_name=True)


def to_out(event: models.Event) -> EventOut:
    return calendar_event_out(CalendarEvent.from_model(event), created_at=event.created_at)

def calendar_event_out(event: CalendarEvent, created_at: Optional[datetime] = None) -> EventOut:
    return EventOut(
        id=event.id,
        title=event.title,
        start_at=event.start,
        end_at=event.end,
        all_day=event.all_day,
        description=event.description,
        location=event.location,
        category=event.category,
        rrule=event.rrule.to_dict() if event.rrule else None,
        background_color=event.background_color,
        border_color=event.border_color,
        text_color=event.text_color,
        user_id=event.user_id,
        created_by=event.created_by,
        family_group=event.family_group,
        member_id=event.member_id,
        recurring_event_id=event.extra.get("recurring_event_id"),
        created_at=created_at,
    )


def _visible_event(db: Session, event_id: str, viewer: models.User, service: EventService | None = None) -> models.Event:
    service = service or EventService()
    try:
        event = service.get_event(db, event_id)
    except EventNotFound:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")
    if event_id not in {e.id for e in service.list_for_viewer(db, viewer.id)}:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")
    return event


def _require_owner(event: models.Event, viewer: models.User):
    if (event.created_by or event.user_id) != viewer.id:
        raise ForbiddenError("EVENT_FORBIDDEN", "Only the event creator can change this event")


@router.post("", response_model=EventOut, status_code=201)
def create_event(body: EventCreate, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    event_service = EventService()
    try:
        event = event_service.create_event(
            db=db,
            user_id=viewer.id,
            title=body.title,
            start_at=body.start_at,
            end_at=body.end_at,
            all_day=body.all_day,
            description=body.description,
            location=body.location,
            category=body.category.value if body.category else None,
            rrule=body.rrule.to_rule().to_dict() if body.rrule else None,
            background_color=body.background_color,
            border_color=body.border_color,
            text_color=body.text_color,
        )
    except EventInvalid as e:
        raise ValidationAppError("EVENT_INVALID", str(e))
    get_event_cache().invalidate()
    return to_out(event)

@router.get("", response_model=List[EventOut])
def list_events(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return [to_out(e) for e in EventService().list_for_viewer(db, viewer.id)]

@router.get("/calendar", response_model=CalendarOut)
def get_calendar(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    viewer: models.User = Depends(get_viewer),
):
    """Stored, cached and generated events reconciled for the viewer.

    With both ``start`` and ``end`` recurring events are expanded into
    occurrences inside the window.
    """
    if (start is None) != (end is None):
        raise ValidationAppError("CALENDAR_WINDOW_INVALID", "start and end must be given together")
    if start is not None and end < start:
        raise ValidationAppError("CALENDAR_WINDOW_INVALID", "end before start")
    view = CalendarService().load_calendar(db, viewer.id, window_start=start, window_end=end)
    return CalendarOut(
        family_group=view.viewer_group,
        remote_available=view.remote_available,
        events=[calendar_event_out(e) for e in view.events],
    )

@router.get("/rsvps/me", response_model=List[RSVPOut])
def my_rsvps(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return [
        RSVPOut(event_id=r.event_id, user_id=r.user_id, status=r.status)
        for r in RSVPService().list_for_user(db, viewer.id)
    ]

@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return to_out(_visible_event(db, event_id, viewer))

@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: str, body: EventUpdate, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    event_service = EventService()
    _require_owner(_visible_event(db, event_id, viewer, event_service), viewer)
    sent = body.model_fields_set
    changes = body.model_dump(include=sent, exclude={"rrule", "category"})
    if "category" in sent:
        changes["category"] = body.category.value if body.category else None
    if "rrule" in sent:
        changes["rrule"] = body.rrule.to_rule().to_dict() if body.rrule else None
    try:
        event = event_service.update_event(db=db, event_id=event_id, changes=changes)
    except EventInvalid as e:
        raise ValidationAppError("EVENT_INVALID", str(e))
    get_event_cache().invalidate()
    return to_out(event)

@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    event_service = EventService()
    _require_owner(_visible_event(db, event_id, viewer, event_service), viewer)
    event_service.delete_event(db, event_id)
    get_event_cache().invalidate()

@router.put("/{event_id}/rsvp", response_model=RSVPOut)
def save_rsvp(event_id: str, body: RSVPIn, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    event = _visible_event(db, event_id, viewer)
    rsvp = RSVPService().save_rsvp(db, event, viewer.id, body.status)
    return RSVPOut(event_id=rsvp.event_id, user_id=rsvp.user_id, status=rsvp.status)

@router.get("/{event_id}/rsvp", response_model=RSVPOut)
def get_my_rsvp(event_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _visible_event(db, event_id, viewer)
    status = RSVPService().get_status(db, event_id, viewer.id)
    return RSVPOut(event_id=event_id, user_id=viewer.id, status=status)

@router.delete("/{event_id}/rsvp", status_code=204)
def delete_my_rsvp(event_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _visible_event(db, event_id, viewer)
    try:
        RSVPService().delete_rsvp(db, event_id, viewer.id)
    except RSVPNotFound:
        raise NotFoundError("RSVP_NOT_FOUND", "RSVP not found")

@router.get("/{event_id}/rsvps", response_model=List[RSVPOut])
def list_event_rsvps(event_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    _visible_event(db, event_id, viewer)
    return [
        RSVPOut(event_id=r.event_id, user_id=r.user_id, status=r.status)
        for r in RSVPService().list_for_event(db, event_id)
    ]
