from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime, date, timedelta, timezone
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..db import models
from ..errors import NotFoundError, ValidationAppError
from ..metrics import NOTIFICATIONS_GENERATED
from ..services.notification_service import NotificationService, NotificationNotFound
from .auth import get_real_viewer, get_viewer

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool = Field(False, alias="isRead")
    related_id: Optional[str] = Field(None, alias="relatedId")
    metadata: Optional[dict] = None
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class GenerateIn(BaseModel):
    today: Optional[date] = None


def job_date(body: Optional[GenerateIn]) -> Optional[date]:
    """Requested run date; only a day either side of the server date is accepted."""
    if body is None or body.today is None:
        return None
    server_today = datetime.now(timezone.utc).date()
    if abs(body.today - server_today) > timedelta(days=1):
        raise ValidationAppError("INVALID_RUN_DATE", "today must be within one day of the server date")
    return body.today


def to_out(n: models.Notification) -> NotificationOut:
    return NotificationOut(
        id=n.id,
        type=n.type,
        title=n.title,
        message=n.message,
        is_read=n.is_read,
        related_id=n.related_id,
        metadata=n.meta,
        created_at=n.created_at,
    )


@router.get("", response_model=List[NotificationOut])
def list_notifications(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return [to_out(n) for n in NotificationService().list_for_user(db, viewer.id)]


@router.get("/unread-count")
def unread_count(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return {"count": NotificationService().unread_count(db, viewer.id)}


@router.post("/read-all")
def mark_all_read(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return {"updated": NotificationService().mark_all_read(db, viewer.id)}


@router.delete("/read")
def delete_read(db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    return {"deleted": NotificationService().delete_all_read(db, viewer.id)}


@router.post("/generate/birthdays")
def generate_birthdays(
    body: GenerateIn | None = None,
    db: Session = Depends(get_db),
    viewer: models.User = Depends(get_real_viewer),
):
    created = NotificationService().generate_birthday_notifications(db, today=job_date(body))
    NOTIFICATIONS_GENERATED.labels(kind="birthday").inc(created)
    return {"created": created}


@router.post("/generate/event-reminders")
def generate_event_reminders(
    body: GenerateIn | None = None,
    db: Session = Depends(get_db),
    viewer: models.User = Depends(get_real_viewer),
):
    created = NotificationService().generate_event_reminders(db, today=job_date(body))
    NOTIFICATIONS_GENERATED.labels(kind="event_reminder").inc(created)
    return {"created": created}


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    try:
        return to_out(NotificationService().mark_read(db, notification_id, viewer.id))
    except NotificationNotFound:
        raise NotFoundError("NOTIFICATION_NOT_FOUND", "Notification not found")


@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: str, db: Session = Depends(get_db), viewer: models.User = Depends(get_viewer)):
    try:
        NotificationService().delete(db, notification_id, viewer.id)
    except NotificationNotFound:
        raise NotFoundError("NOTIFICATION_NOT_FOUND", "Notification not found")
