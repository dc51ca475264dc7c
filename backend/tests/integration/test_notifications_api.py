from datetime import date, timedelta


def test_generate_birthday_notifications_and_manage_them(client, real_headers):
    soon = date.today() + timedelta(days=7)
    client.put("/members/me", json={"firstName": "Rae", "lastName": "Real"}, headers=real_headers)
    client.post("/members", json={"firstName": "Bo", "lastName": "Real", "birthday": f"2000-{soon:%m-%d}"}, headers=real_headers)

    r = client.post("/notifications/generate/birthdays", json={"today": date.today().isoformat()}, headers=real_headers)
    assert r.status_code == 200
    assert r.json() == {"created": 1}
    # second run on the same day does nothing
    assert client.post("/notifications/generate/birthdays", json={"today": date.today().isoformat()}, headers=real_headers).json() == {"created": 0}

    notes = client.get("/notifications", headers=real_headers).json()
    assert len(notes) == 1
    assert notes[0]["type"] == "birthday"
    assert notes[0]["message"] == "Bo Real's birthday is in 7 days!"
    assert notes[0]["isRead"] is False
    assert client.get("/notifications/unread-count", headers=real_headers).json() == {"count": 1}

    # other users cannot touch it
    assert client.post(f"/notifications/{notes[0]['id']}/read").status_code == 404

    read = client.post(f"/notifications/{notes[0]['id']}/read", headers=real_headers)
    assert read.status_code == 200
    assert read.json()["isRead"] is True
    assert client.get("/notifications/unread-count", headers=real_headers).json() == {"count": 0}

    assert client.delete("/notifications/read", headers=real_headers).json() == {"deleted": 1}
    assert client.get("/notifications", headers=real_headers).json() == []


def test_generate_event_reminders(client, login):
    owner = login("owner@example.com")
    guest = login("guest@example.com")
    start = date.today() + timedelta(days=30)
    event = client.post("/events", json={"title": "Reunion", "startAt": f"{start.isoformat()}T18:00:00+00:00"}, headers=owner).json()
    client.put(f"/events/{event['id']}/rsvp", json={"status": "maybe"}, headers=guest)

    r = client.post("/notifications/generate/event-reminders", json={"today": date.today().isoformat()}, headers=owner)
    assert r.json() == {"created": 1}

    notes = client.get("/notifications", headers=guest).json()
    assert notes[0]["title"] == "Upcoming Event: Reunion"
    assert notes[0]["message"] == "Reunion is in 30 days"
    assert notes[0]["relatedId"] == event["id"]


def test_event_cancellation_notifies_attendees(client, login):
    owner = login("owner@example.com")
    guest = login("guest@example.com")
    event = client.post("/events", json={"title": "Reunion", "startAt": "2030-01-01T18:00:00+00:00"}, headers=owner).json()
    client.put(f"/events/{event['id']}/rsvp", json={"status": "yes"}, headers=guest)

    assert client.delete(f"/events/{event['id']}", headers=owner).status_code == 204

    notes = client.get("/notifications", headers=guest).json()
    assert [n["type"] for n in notes] == ["event_cancelled"]
    assert notes[0]["message"] == '"Reunion" has been cancelled'


def test_mark_all_and_delete_single(client, login):
    owner = login("owner@example.com")
    guest = login("guest@example.com")
    event = client.post("/events", json={"title": "Reunion", "startAt": "2030-01-01T18:00:00+00:00"}, headers=owner).json()
    client.put(f"/events/{event['id']}/rsvp", json={"status": "yes"}, headers=guest)
    client.put(f"/events/{event['id']}/rsvp", json={"status": "no"}, headers=guest)

    assert client.post("/notifications/read-all", headers=owner).json() == {"updated": 2}
    notes = client.get("/notifications", headers=owner).json()
    assert client.delete(f"/notifications/{notes[0]['id']}", headers=owner).status_code == 204
    assert len(client.get("/notifications", headers=owner).json()) == 1
    assert client.delete("/notifications/missing", headers=owner).status_code == 404


def test_generation_refused_for_demo_visitors(client):
    for kind in ("birthdays", "event-reminders"):
        r = client.post(f"/notifications/generate/{kind}")
        assert r.status_code == 403
        assert r.json()["detail"]["code"] == "DEMO_USER_FORBIDDEN"


def test_generation_rejects_run_dates_far_from_today(client, real_headers):
    client.post("/members", json={"firstName": "Bo", "lastName": "Real", "birthday": "2000-01-01"}, headers=real_headers)
    for offset in (-30, 30):
        day = date.today() + timedelta(days=offset)
        r = client.post("/notifications/generate/birthdays", json={"today": day.isoformat()}, headers=real_headers)
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "INVALID_RUN_DATE"
    assert client.get("/notifications", headers=real_headers).json() == []
