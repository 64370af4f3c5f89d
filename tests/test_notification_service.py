"""Tests for services/notification_service.py."""

import json

import httpx

from services.notification_service import NotificationService

from helpers import TUESDAY, at


def gateway(handler) -> NotificationService:
    return NotificationService(
        gateway_url="https://notify.example.com/",
        api_key="secret",
        from_email="events@example.com",
        from_phone="+15550000000",
        transport=httpx.MockTransport(handler)
    )


def test_mock_mode_records_without_sending(monkeypatch):
    monkeypatch.delenv("NOTIFY_GATEWAY_URL", raising=False)
    monkeypatch.delenv("NOTIFY_API_KEY", raising=False)
    notifier = NotificationService()

    results = notifier.send_event_invitation(
        participant_name="Alice",
        event_name="Team Dinner",
        creator_name="Bob",
        availability_url="https://example.com/respond/abc",
        email="alice@example.com",
        phone_number="+15550100001"
    )

    assert notifier.is_mock
    assert [r.channel for r in results] == ["email", "sms"]
    assert all(r.success and r.message_id.startswith("MOCK_") for r in results)
    sent = notifier.get_sent_messages()
    assert sent[0]["subject"] == 'Bob invited you to "Team Dinner"'
    assert "https://example.com/respond/abc" in sent[1]["body"]

    notifier.clear_messages()
    assert notifier.get_sent_messages() == []


def test_no_contact_details_sends_nothing():
    notifier = NotificationService(gateway_url="", api_key="")
    assert notifier.send_event_invitation("Alice", "Dinner", "Bob", "https://example.com") == []


def test_gateway_delivery():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"id": f"msg_{len(requests)}"})

    notifier = gateway(handler)
    results = notifier.send_event_confirmation(
        participant_name="Alice",
        event_name="Team Dinner",
        start=at(TUESDAY, 19),
        end=at(TUESDAY, 21),
        email="alice@example.com",
        phone_number="+15550100001"
    )

    assert [r.message_id for r in results] == ["msg_1", "msg_2"]
    assert str(requests[0].url) == "https://notify.example.com/messages"
    assert requests[0].headers["Authorization"] == "Bearer secret"
    email_payload = json.loads(requests[0].content)
    sms_payload = json.loads(requests[1].content)
    assert email_payload["from"] == "events@example.com"
    assert email_payload["subject"].startswith('"Team Dinner" is confirmed for Tuesday, June 03, 2025')
    assert sms_payload["from"] == "+15550000000"
    assert sms_payload["channel"] == "sms"


def test_custom_confirmation_message():
    notifier = NotificationService(gateway_url="", api_key="")

    notifier.send_event_confirmation(
        participant_name="Alice",
        event_name="Team Dinner",
        start=at(TUESDAY, 19),
        end=at(TUESDAY, 21),
        message="See you at 7!",
        event_details_url="https://example.com/e/abc",
        phone_number="+15550100001"
    )

    assert notifier.get_sent_messages()[0]["body"] == "See you at 7! Details: https://example.com/e/abc"


def test_gateway_failure_is_reported_not_raised():
    notifier = gateway(lambda request: httpx.Response(500, json={"error": "down"}))

    results = notifier.send_event_confirmation(
        "Alice", "Team Dinner", at(TUESDAY, 19), at(TUESDAY, 21), email="alice@example.com"
    )

    assert len(results) == 1
    assert not results[0].success
    assert results[0].error
    assert notifier.get_sent_messages() == []


def test_gateway_unreachable_is_reported_not_raised():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    results = gateway(handler).send_event_invitation(
        "Alice", "Dinner", "Bob", "https://example.com", phone_number="+15550100001"
    )

    assert not results[0].success
    assert "connection refused" in results[0].error


def test_gateway_reply_without_message_object_is_reported_not_raised():
    notifier = gateway(lambda request: httpx.Response(200, json=["queued"]))

    results = notifier.send_event_invitation(
        "Alice", "Dinner", "Bob", "https://example.com", email="a@example.com"
    )

    assert len(results) == 1
    assert not results[0].success
    assert "queued" in results[0].error
    assert notifier.get_sent_messages() == []


def test_gateway_reply_without_id_still_counts_as_sent():
    notifier = gateway(lambda request: httpx.Response(202, json={"status": "queued"}))

    results = notifier.send_event_invitation(
        "Alice", "Dinner", "Bob", "https://example.com", email="a@example.com"
    )

    assert results[0].success
    assert results[0].message_id is None
