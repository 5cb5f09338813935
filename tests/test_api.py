from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.appointment import AppointmentStatus


BOOKING_URL = "/api/v1/book-appointment"
REMINDERS_URL = "/api/v1/send-reminders"

JO = {
    "name": "Jo",
    "email": "jo@example.com",
    "phone": "555-1111",
    "dateTime": "2025-03-01T11:00:00",
}


def test_booking_succeeds(client, store):
    resp = client.post(BOOKING_URL, json=JO)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Appointment booked successfully!"}
    assert len(store.records) == 1
    record = next(iter(store.records.values()))
    assert record.status == AppointmentStatus.booked
    assert record.reminder_sent is False


def test_second_identical_booking_conflicts(client, store):
    assert client.post(BOOKING_URL, json=JO).status_code == 200

    resp = client.post(BOOKING_URL, json=JO)

    assert resp.status_code == 409
    assert resp.json() == {"error": "This slot is already booked!"}
    assert len(store.records) == 1


@pytest.mark.parametrize("field", ["name", "email", "phone", "dateTime"])
def test_missing_field_returns_400(client, store, field):
    payload = {k: v for k, v in JO.items() if k != field}

    resp = client.post(BOOKING_URL, json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields."}
    assert store.records == {}


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"])
def test_non_post_is_rejected(client, method):
    resp = client.request(method, BOOKING_URL)

    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}


def test_head_is_rejected(client):
    assert client.head(BOOKING_URL).status_code == 405


def test_malformed_body_is_internal_error(client, store):
    resp = client.post(BOOKING_URL, content=b"{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal Server Error"
    assert body["details"]
    assert store.records == {}


def test_non_object_body_is_internal_error(client):
    resp = client.post(BOOKING_URL, json=["Jo"])

    assert resp.status_code == 500
    assert resp.json()["error"] == "Internal Server Error"


def test_mail_failure_is_internal_error(client, store, mailer):
    mailer.fail_for.add("jo@example.com")

    resp = client.post(BOOKING_URL, json=JO)

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal Server Error"
    assert "SMTP connection refused" in body["details"]
    # no rollback of the created record
    assert len(store.records) == 1


def test_store_failure_is_internal_error(client, store):
    store.fail_queries = True

    resp = client.post(BOOKING_URL, json=JO)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error", "details": "record store unreachable"}


def test_reminder_sweep_reports_count(client, store, mailer):
    # The endpoint sweeps relative to the wall clock
    soon = datetime.now(timezone.utc) + timedelta(hours=24, minutes=5)
    store.add(name="Jo", email="jo@example.com", phone="1", date_time=soon.strftime("%Y-%m-%dT%H:%M:%S"))
    store.add(name="Sam", email="sam@example.com", phone="2", date_time=(soon + timedelta(hours=3)).strftime("%Y-%m-%dT%H:%M:%S"))

    resp = client.post(REMINDERS_URL)

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Reminders sent"
    assert body["count"] == 1
    assert body["sent"] == 1
    assert body["failed"] == 0
    assert [to for to, _, _ in mailer.sent] == ["jo@example.com"]


def test_reminder_sweep_accepts_get(client):
    resp = client.get(REMINDERS_URL)

    assert resp.status_code == 200
    assert resp.json()["count"] == 0


def test_reminder_sweep_query_failure(client, store):
    store.fail_queries = True

    resp = client.post(REMINDERS_URL)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error", "details": "record store unreachable"}


def test_health(client):
    assert client.get("/").json() == {"status": "ok"}


def test_booking_form_is_served(client):
    resp = client.get("/form")

    assert resp.status_code == 200
    assert 'id="booking-form"' in resp.text
