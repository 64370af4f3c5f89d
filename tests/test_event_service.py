"""Tests for services/event_service.py."""

import httpx
import pytest

from services.event_service import EventService
from services.event_store import EventAlreadyFinalizedError, EventNotFoundError, InMemoryEventStore
from services.notification_service import NotificationService

from helpers import SATURDAY, TUESDAY, at


@pytest.fixture
def store(make_event, make_participant):
    store = InMemoryEventStore()
    store.add_event(make_event(preferred_time="evening", duration="2-hours"), [
        make_participant("p1", "Alice", [(at(TUESDAY, 19), at(TUESDAY, 22))], email="alice@example.com"),
        make_participant("p2", "Bob", [(at(TUESDAY, 18), at(TUESDAY, 21))], phone_number="+15550100002"),
        make_participant("p3", "Carol", [(at(SATURDAY, 18), at(SATURDAY, 20))]),
        make_participant("p4", "Dan", has_responded=False, email="dan@example.com"),
    ])
    return store


@pytest.fixture
def notifier():
    return NotificationService(gateway_url="", api_key="")


def test_get_recommendations(store, notifier):
    service = EventService(store, notifier=notifier)

    recommendations = service.get_recommendations("evt_1")

    assert recommendations[0].available_participant_ids == ("p1", "p2")
    assert recommendations[0].conflict_participants == ("Carol",)
    assert len(service.get_recommendations("evt_1", limit=1)) == 1


def test_get_recommendations_for_unknown_event(store, notifier):
    with pytest.raises(EventNotFoundError):
        EventService(store, notifier=notifier).get_recommendations("missing")


def test_get_heatmap(store, notifier):
    cells = EventService(store, notifier=notifier).get_heatmap("evt_1")

    assert len(cells) == 21
    evening = next(c for c in cells if c.day.day == TUESDAY and c.period == "Evening")
    assert evening.available_names == ["Alice", "Bob"]
    assert evening.total_respondents == 3


def test_finalize_persists_and_notifies(store, notifier):
    service = EventService(store, notifier=notifier)
    best = service.get_recommendations("evt_1")[0]

    result = service.finalize("evt_1", best.start_time, best.end_time, message="Dinner is on!")

    assert store.get_finalized("evt_1") is result.finalized
    assert result.failed_deliveries == []
    recipients = [(m["channel"], m["to"]) for m in notifier.get_sent_messages()]
    assert recipients == [("email", "alice@example.com"), ("sms", "+15550100002"), ("email", "dan@example.com")]


@pytest.mark.parametrize("reply", [
    lambda request: httpx.Response(503),
    lambda request: httpx.Response(200, json=["queued"]),
])
def test_failed_notifications_do_not_undo_finalize(store, reply):
    failing = NotificationService(
        gateway_url="https://notify.example.com",
        api_key="secret",
        transport=httpx.MockTransport(reply)
    )
    service = EventService(store, notifier=failing)

    result = service.finalize("evt_1", at(TUESDAY, 19), at(TUESDAY, 21))

    assert store.get_finalized("evt_1") is result.finalized
    assert len(result.failed_deliveries) == 3
    with pytest.raises(EventAlreadyFinalizedError):
        service.finalize("evt_1", at(TUESDAY, 19), at(TUESDAY, 21))


def test_finalize_rejects_inverted_range(store, notifier):
    with pytest.raises(ValueError):
        EventService(store, notifier=notifier).finalize("evt_1", at(TUESDAY, 21), at(TUESDAY, 19))
    assert store.get_finalized("evt_1") is None


def test_export_calendar(store, notifier):
    service = EventService(store, notifier=notifier)
    finalized = service.finalize("evt_1", at(TUESDAY, 19), at(TUESDAY, 21)).finalized

    filename, ics = service.export_calendar("evt_1", finalized)

    assert filename == "Team-Dinner.ics"
    assert "DTSTART:20250603T190000Z" in ics
    assert "ATTENDEE;ROLE=REQ-PARTICIPANT;RSVP=FALSE:mailto:alice@example.com" in ics
    # Non-respondents are not put on the invite
    assert "dan@example.com" not in ics


def test_export_calendar_for_another_event(store, notifier, make_event):
    store.add_event(make_event(id="evt_2", name="Lunch"))
    service = EventService(store, notifier=notifier)
    finalized = service.finalize("evt_1", at(TUESDAY, 19), at(TUESDAY, 21)).finalized

    with pytest.raises(ValueError):
        service.export_calendar("evt_2", finalized)
