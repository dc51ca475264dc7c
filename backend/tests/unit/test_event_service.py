import pytest
from unittest.mock import Mock
from datetime import datetime, timedelta, timezone
from familyhub.services.event_service import EventService, EventNotFound, EventInvalid
from familyhub.db.models import Event, EventRSVP
from familyhub.domain.enums import NotificationType

NOW = datetime(2026, 5, 1, 9, tzinfo=timezone.utc)


class FakeRepo:
    def __init__(self, events=None):
        self.events = {e.id: e for e in (events or [])}

    def list_all(self, db):
        return list(self.events.values())

    def get(self, db, event_id):
        return self.events.get(event_id)


def test_create_event_stamps_owner_and_group():
    """Created events carry the creator and the creator's family group"""
    db_mock = Mock()
    service = EventService(repository=FakeRepo())

    result = service.create_event(
        db=db_mock,
        user_id="demo-user",
        title="Picnic",
        start_at=NOW,
        end_at=NOW + timedelta(hours=2),
        category="family-event",
    )

    assert result.user_id == "demo-user"
    assert result.created_by == "demo-user"
    assert result.family_group == "demo"
    db_mock.add.assert_called_once()
    db_mock.commit.assert_called_once()
    db_mock.refresh.assert_called_once()


def test_create_event_rejects_blank_title_and_inverted_times():
    db_mock = Mock()
    service = EventService(repository=FakeRepo())

    with pytest.raises(EventInvalid):
        service.create_event(db=db_mock, user_id="u1", title="  ", start_at=NOW)
    with pytest.raises(EventInvalid):
        service.create_event(db=db_mock, user_id="u1", title="x", start_at=NOW, end_at=NOW - timedelta(minutes=1))
    db_mock.add.assert_not_called()


def test_get_event_not_found():
    service = EventService(repository=FakeRepo())
    with pytest.raises(EventNotFound):
        service.get_event(Mock(), "nonexistent-id")


def test_update_event_applies_partial_changes():
    existing = Event(id="event-123", title="Original", start_at=NOW, end_at=NOW + timedelta(hours=1))
    db_mock = Mock()
    service = EventService(repository=FakeRepo([existing]))

    service.update_event(db=db_mock, event_id="event-123", changes={"title": "Updated", "location": "Park"})

    assert existing.title == "Updated"
    assert existing.location == "Park"
    assert existing.start_at == NOW
    db_mock.commit.assert_called_once()


def test_update_event_explicit_none_clears_optional_fields_only():
    existing = Event(
        id="event-123", title="Original", start_at=NOW, end_at=NOW + timedelta(hours=1),
        category="appointment", rrule={"freq": "weekly"},
    )
    service = EventService(repository=FakeRepo([existing]))

    service.update_event(
        db=Mock(), event_id="event-123",
        changes={"end_at": None, "category": None, "rrule": None, "title": None, "start_at": None},
    )

    assert existing.end_at is None
    assert existing.category is None
    assert existing.rrule is None
    assert existing.title == "Original"
    assert existing.start_at == NOW


def test_update_event_invalid_rolls_back():
    existing = Event(id="event-123", title="Original", start_at=NOW, end_at=NOW + timedelta(hours=1))
    db_mock = Mock()
    service = EventService(repository=FakeRepo([existing]))

    with pytest.raises(EventInvalid):
        service.update_event(db=db_mock, event_id="event-123", changes={"end_at": NOW - timedelta(hours=1)})

    db_mock.rollback.assert_called_once()
    db_mock.commit.assert_not_called()


def test_delete_event_notifies_attendees():
    """Cancellation goes to yes / maybe RSVPs only"""
    existing = Event(id="event-123", title="Reunion", start_at=NOW)
    rsvps = [
        EventRSVP(event_id="event-123", user_id="bob", status="yes"),
        EventRSVP(event_id="event-123", user_id="cat", status="maybe"),
        EventRSVP(event_id="event-123", user_id="dee", status="no"),
    ]
    db_mock = Mock()
    db_mock.query.return_value.filter.return_value.all.return_value = rsvps
    notifications = Mock()
    service = EventService(repository=FakeRepo([existing]), notifications=notifications)

    service.delete_event(db_mock, "event-123")

    notified = [c.args[1] for c in notifications.create_notification.call_args_list]
    assert notified == ["bob", "cat"]
    first = notifications.create_notification.call_args_list[0]
    assert first.args[2] == NotificationType.EVENT_CANCELLED
    assert first.args[4] == '"Reunion" has been cancelled'
    db_mock.delete.assert_any_call(existing)
    assert db_mock.delete.call_count == 4
    db_mock.commit.assert_called_once()


def test_delete_event_survives_notification_failure():
    existing = Event(id="event-123", title="Reunion", start_at=NOW)
    db_mock = Mock()
    db_mock.query.return_value.filter.return_value.all.return_value = [
        EventRSVP(event_id="event-123", user_id="bob", status="yes"),
    ]
    notifications = Mock()
    notifications.create_notification.side_effect = RuntimeError("boom")
    service = EventService(repository=FakeRepo([existing]), notifications=notifications)

    service.delete_event(db_mock, "event-123")

    db_mock.rollback.assert_called_once()
    db_mock.delete.assert_any_call(existing)
    db_mock.commit.assert_called_once()


def test_list_for_viewer_hides_other_group(monkeypatch):
    events = [
        Event(id="real", user_id="u1", family_group="real", title="r", start_at=NOW, all_day=False),
        Event(id="demo", user_id="demo-user", family_group="demo", title="d", start_at=NOW, all_day=False),
    ]
    monkeypatch.setattr("familyhub.services.event_service.member_service.list_members", lambda db, viewer_id: [])
    service = EventService(repository=FakeRepo(events))

    assert [e.id for e in service.list_for_viewer(Mock(), "someone")] == ["real"]
    assert [e.id for e in service.list_for_viewer(Mock(), "demo-user")] == ["demo"]
