from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import logging
from ..db import models
from ..domain.calendar import CalendarEvent, ensure_utc
from ..domain.enums import NotificationType, RSVPStatus
from ..repositories.event_repository import EventRepository, SqlAlchemyEventRepository
from . import member_service
from .calendar_merge import is_visible_to_viewer
from .family_groups import get_user_family_group
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = {
    "end_at", "description", "location", "category", "rrule",
    "background_color", "border_color", "text_color",
}

class EventNotFound(Exception):
    pass

class EventInvalid(Exception):
    pass

class EventService:
    def __init__(self, repository: EventRepository | None = None, notifications: NotificationService | None = None):
        self.repo = repository or SqlAlchemyEventRepository()
        self.notifications = notifications or NotificationService()

    @staticmethod
    def _check_times(start_at: datetime, end_at: Optional[datetime]):
        if end_at is not None and ensure_utc(end_at) < ensure_utc(start_at):
            raise EventInvalid("end before start")

    def create_event(self, db: Session, user_id: str, title: str, start_at: datetime,
                    end_at: Optional[datetime] = None, all_day: bool = False,
                    description: Optional[str] = None, location: Optional[str] = None,
                    category: Optional[str] = None, rrule: Optional[Dict[str, Any]] = None,
                    background_color: Optional[str] = None, border_color: Optional[str] = None,
                    text_color: Optional[str] = None, event_id: Optional[str] = None) -> models.Event:
        if not title or not title.strip():
            raise EventInvalid("title is required")
        self._check_times(start_at, end_at)
        event = models.Event(
            user_id=user_id,
            created_by=user_id,
            family_group=get_user_family_group(user_id),
            title=title,
            start_at=start_at,
            end_at=end_at,
            all_day=all_day,
            description=description,
            location=location,
            category=category,
            rrule=rrule,
            background_color=background_color,
            border_color=border_color,
            text_color=text_color,
        )
        if event_id:
            event.id = event_id
        db.add(event)
        db.commit()
        db.refresh(event)
        logger.info("Event %s created by %s (%s)", event.id, user_id, event.family_group)
        return event

    def get_event(self, db: Session, event_id: str) -> models.Event:
        event = self.repo.get(db, event_id)
        if not event:
            raise EventNotFound()
        return event

    def list_for_viewer(self, db: Session, viewer_id: str) -> List[models.Event]:
        viewer_group = get_user_family_group(viewer_id)
        member_ids = member_service.family_member_ids(member_service.list_members(db, viewer_id))
        return [
            e for e in self.repo.list_all(db)
            if is_visible_to_viewer(CalendarEvent.from_model(e), viewer_group, member_ids)
        ]

    def update_event(self, db: Session, event_id: str, changes: Dict[str, Any]) -> models.Event:
        event = self.get_event(db, event_id)

        for key in ("title", "start_at", "end_at", "all_day", "description", "location",
                    "category", "rrule", "background_color", "border_color", "text_color"):
            if key not in changes:
                continue
            value = changes[key]
            # an explicit None clears optional fields only
            if value is None and key not in CLEARABLE_FIELDS:
                continue
            setattr(event, key, value)
        if not event.title or not event.title.strip():
            db.rollback()
            raise EventInvalid("title is required")
        try:
            self._check_times(event.start_at, event.end_at)
        except EventInvalid:
            db.rollback()
            raise

        event.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(event)
        return event

    def delete_event(self, db: Session, event_id: str, notify: bool = True):
        event = self.get_event(db, event_id)
        rsvps = db.query(models.EventRSVP).filter(models.EventRSVP.event_id == event_id).all()

        if notify:
            for rsvp in rsvps:
                if rsvp.status not in (RSVPStatus.YES.value, RSVPStatus.MAYBE.value):
                    continue
                try:
                    self.notifications.create_notification(
                        db,
                        rsvp.user_id,
                        NotificationType.EVENT_CANCELLED,
                        "Event Cancelled",
                        f'"{event.title}" has been cancelled',
                        related_id=event.id,
                        metadata={"event_title": event.title},
                    )
                except Exception:
                    logger.exception("Failed to send cancellation notification to %s", rsvp.user_id)
                    db.rollback()

        for rsvp in rsvps:
            db.delete(rsvp)
        db.delete(event)
        db.commit()
