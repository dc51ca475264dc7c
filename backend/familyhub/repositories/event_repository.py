from __future__ import annotations
from typing import Protocol, List, Optional
from sqlalchemy.orm import Session

from ..db import models


class EventRepository(Protocol):
    def list_all(self, db: Session) -> List[models.Event]: ...
    def get(self, db: Session, event_id: str) -> Optional[models.Event]: ...


class SqlAlchemyEventRepository:
    """SQLAlchemy-backed event store."""

    def list_all(self, db: Session) -> List[models.Event]:
        return db.query(models.Event).order_by(models.Event.start_at).all()

    def get(self, db: Session, event_id: str) -> Optional[models.Event]:
        return db.query(models.Event).filter(models.Event.id == event_id).first()
