from datetime import datetime, timezone

import pytest

from familyhub.db import models
from familyhub.domain.enums import RSVPStatus
from familyhub.services.rsvp_service import RSVPNotFound, RSVPService


@pytest.fixture
def event(db):
    db.add(models.FamilyMember(id="bob", first_name="Bob", last_name="Lee"))
    e = models.Event(id="e1", user_id="ann", created_by="ann", title="Reunion",
                     start_at=datetime(2026, 8, 2, tzinfo=timezone.utc))
    db.add(e)
    db.commit()
    return e


def test_rsvp_upsert_and_creator_notification(db, event):
    svc = RSVPService()
    svc.save_rsvp(db, event, "bob", RSVPStatus.MAYBE)
    svc.save_rsvp(db, event, "bob", RSVPStatus.YES)

    assert svc.get_status(db, "e1", "bob") == "yes"
    assert len(svc.list_for_event(db, "e1")) == 1
    messages = {n.message for n in db.query(models.Notification).filter_by(user_id="ann").all()}
    assert messages == {"Bob Lee might attend your event", "Bob Lee is attending your event"}


def test_creator_rsvp_does_not_notify_self(db, event):
    RSVPService().save_rsvp(db, event, "ann", RSVPStatus.YES)
    assert db.query(models.Notification).count() == 0


def test_unknown_responder_is_someone(db, event):
    RSVPService().save_rsvp(db, event, "stranger", RSVPStatus.NO)
    n = db.query(models.Notification).one()
    assert n.message == "Someone cannot attend your event"
    assert n.meta["rsvp_status"] == "no"


def test_delete_rsvp(db, event):
    svc = RSVPService()
    svc.save_rsvp(db, event, "bob", RSVPStatus.YES)
    svc.delete_rsvp(db, "e1", "bob")
    assert svc.get_status(db, "e1", "bob") is None
    with pytest.raises(RSVPNotFound):
        svc.delete_rsvp(db, "e1", "bob")
