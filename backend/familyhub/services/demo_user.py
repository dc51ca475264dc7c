"""Utility for ensuring presence of the demo (fallback) user.

Requests without a bearer token act as this user, which always belongs to the
demo family group.
"""
from sqlalchemy.orm import Session
from .. import config
from ..db import models


def get_or_create_demo_user(db: Session) -> models.User:
    user = db.query(models.User).filter(models.User.id == config.DEMO_USER_ID).first()
    if user:
        return user
    user = models.User(id=config.DEMO_USER_ID, email=config.DEMO_EMAIL)
    db.add(user)
    db.commit()
    return db.query(models.User).filter(models.User.id == config.DEMO_USER_ID).first()
