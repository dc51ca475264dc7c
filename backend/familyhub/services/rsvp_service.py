"""Event RSVPs. One answer per (event, user); the event creator hears about it."""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import NotificationType, RSVPStatus
from . import member_service
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_STATUS_TEXT = {
    RSVPStatus.YES: "is attending",
    RSVPStatus.MAYBE: "might attend",
    RSVPStatus.NO: "cannot attend",
}


class RSVPNotFound(Exception):
    pass


class RSVPService:
    def __init__(self, notifications: NotificationService | None = None):
        self.notifications = notifications or NotificationService()

    def save_rsvp(self, db: Session, event: models.Event, user_id: str, status: RSVPStatus) -> models.EventRSVP:
        status = RSVPStatus(status)
        rsvp = (
            db.query(models.EventRSVP)
            .filter(models.EventRSVP.event_id == event.id, models.EventRSVP.user_id == user_id)
            .first()
        )
        if rsvp is None:
            rsvp = models.EventRSVP(event_id=event.id, user_id=user_id, status=status.value)
            db.add(rsvp)
        else:
            rsvp.status = status.value
            rsvp.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(rsvp)

        creator_id = event.created_by or event.user_id
        if creator_id and creator_id != user_id:
            try:
                name = member_service.get_display_name(db, user_id) or "Someone"
                self.notifications.create_notification(
                    db,
                    creator_id,
                    NotificationType.EVENT_RSVP,
                    "New RSVP for your event",
                    f"{name} {_STATUS_TEXT[status]} your event",
                    related_id=event.id,
                    metadata={"rsvp_user_id": user_id, "rsvp_status": status.value},
                )
            except Exception:
                # the RSVP itself is already stored
                logger.exception("Failed to create RSVP notification for event %s", event.id)
                db.rollback()
        return rsvp

    def get_status(self, db: Session, event_id: str, user_id: str) -> Optional[str]:
        rsvp = (
            db.query(models.EventRSVP)
            .filter(models.EventRSVP.event_id == event_id, models.EventRSVP.user_id == user_id)
            .first()
        )
        return rsvp.status if rsvp else None

    def list_for_event(self, db: Session, event_id: str) -> List[models.EventRSVP]:
        return db.query(models.EventRSVP).filter(models.EventRSVP.event_id == event_id).all()

    def list_for_user(self, db: Session, user_id: str) -> List[models.EventRSVP]:
        return db.query(models.EventRSVP).filter(models.EventRSVP.user_id == user_id).all()

    def delete_rsvp(self, db: Session, event_id: str, user_id: str):
        rsvp = (
            db.query(models.EventRSVP)
            .filter(models.EventRSVP.event_id == event_id, models.EventRSVP.user_id == user_id)
            .first()
        )
        if not rsvp:
            raise RSVPNotFound()
        db.delete(rsvp)
        db.commit()
