"""In-app notifications: storage plus birthday / event reminder generation."""
from __future__ import annotations
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .. import config
from ..db import models
from ..domain.calendar import ensure_utc
from ..domain.enums import NotificationType, RSVPStatus
from . import member_service
from .event_generator import display_name, next_anniversary, parse_member_date
from .family_groups import normalize_family_group

logger = logging.getLogger(__name__)


class NotificationNotFound(Exception):
    pass


def _days_text(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days} days"


class NotificationService:
    def create_notification(
        self,
        db: Session,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[models.Notification]:
        """Store a notification unless the recipient has muted its type."""
        type = NotificationType(type)
        if type.value in member_service.get_notification_preferences(db, user_id):
            logger.debug("Notification %s suppressed for %s by preferences", type.value, user_id)
            return None
        notification = models.Notification(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            related_id=related_id,
            meta=metadata or None,
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    def list_for_user(self, db: Session, user_id: str) -> List[models.Notification]:
        return (
            db.query(models.Notification)
            .filter(models.Notification.user_id == user_id)
            .order_by(models.Notification.created_at.desc())
            .all()
        )

    def unread_count(self, db: Session, user_id: str) -> int:
        return (
            db.query(models.Notification)
            .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
            .count()
        )

    def _get_owned(self, db: Session, notification_id: str, user_id: str) -> models.Notification:
        notification = (
            db.query(models.Notification)
            .filter(models.Notification.id == notification_id, models.Notification.user_id == user_id)
            .first()
        )
        if not notification:
            raise NotificationNotFound()
        return notification

    def mark_read(self, db: Session, notification_id: str, user_id: str) -> models.Notification:
        notification = self._get_owned(db, notification_id, user_id)
        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return notification

    def mark_all_read(self, db: Session, user_id: str) -> int:
        updated = (
            db.query(models.Notification)
            .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
            .update({models.Notification.is_read: True})
        )
        db.commit()
        return updated

    def delete(self, db: Session, notification_id: str, user_id: str):
        notification = self._get_owned(db, notification_id, user_id)
        db.delete(notification)
        db.commit()

    def delete_all_read(self, db: Session, user_id: str) -> int:
        deleted = (
            db.query(models.Notification)
            .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(True))
            .delete()
        )
        db.commit()
        return deleted

    def _already_notified(self, db: Session, user_id: str, type: NotificationType, related_id: str, days_until: int, today: date) -> bool:
        candidates = (
            db.query(models.Notification)
            .filter(
                models.Notification.user_id == user_id,
                models.Notification.type == type.value,
                models.Notification.related_id == related_id,
            )
            .all()
        )
        return any(
            (n.meta or {}).get("days_until") == days_until and (n.meta or {}).get("sent_on") == today.isoformat()
            for n in candidates
        )

    def generate_birthday_notifications(self, db: Session, today: Optional[date] = None) -> int:
        """Notify the rest of the family 30/7/1/0 days before a living member's birthday."""
        today = today or datetime.now(timezone.utc).date()
        members = member_service.list_members(db, include_all_groups=True)
        created = 0
        for member in members:
            if member.death_date:
                continue
            birthday = parse_member_date(member.birthday)
            if birthday is None:
                continue
            days_until = (next_anniversary(birthday, today) - today).days
            if days_until not in config.REMINDER_DAYS:
                continue
            name = display_name(member)
            group = normalize_family_group(member.family_group)
            for other in members:
                if other.id == member.id or other.death_date or normalize_family_group(other.family_group) != group:
                    continue
                if self._already_notified(db, other.id, NotificationType.BIRTHDAY, member.id, days_until, today):
                    continue
                notification = self.create_notification(
                    db,
                    other.id,
                    NotificationType.BIRTHDAY,
                    f"{name}'s Birthday",
                    f"{name}'s birthday is {_days_text(days_until)}!",
                    related_id=member.id,
                    metadata={"days_until": days_until, "sent_on": today.isoformat()},
                )
                if notification is not None:
                    created += 1
        logger.info("Generated %d birthday notifications", created)
        return created

    def generate_event_reminders(self, db: Session, today: Optional[date] = None) -> int:
        """Remind attendees (yes / maybe) 30/7/1/0 days before an event."""
        today = today or datetime.now(timezone.utc).date()
        rsvps = (
            db.query(models.EventRSVP, models.Event)
            .join(models.Event, models.Event.id == models.EventRSVP.event_id)
            .filter(models.EventRSVP.status.in_([RSVPStatus.YES.value, RSVPStatus.MAYBE.value]))
            .all()
        )
        created = 0
        for rsvp, event in rsvps:
            days_until = (ensure_utc(event.start_at).date() - today).days
            if days_until not in config.REMINDER_DAYS:
                continue
            if self._already_notified(db, rsvp.user_id, NotificationType.EVENT_REMINDER, event.id, days_until, today):
                continue
            if days_until == 0:
                message = f"{event.title} is today!"
            elif days_until == 1:
                message = f"{event.title} is tomorrow!"
            else:
                message = f"{event.title} is in {days_until} days"
            notification = self.create_notification(
                db,
                rsvp.user_id,
                NotificationType.EVENT_REMINDER,
                f"Upcoming Event: {event.title}",
                message,
                related_id=event.id,
                metadata={"days_until": days_until, "sent_on": today.isoformat()},
            )
            if notification is not None:
                created += 1
        logger.info("Generated %d event reminder notifications", created)
        return created
