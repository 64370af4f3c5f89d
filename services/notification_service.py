"""Notification dispatcher for invitations and confirmations (email + SMS)."""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

import httpx
import pytz

logger = logging.getLogger(__name__)

Channel = Literal["email", "sms"]


@dataclass
class DeliveryResult:
    """Outcome of one delivery attempt."""
    success: bool
    channel: Channel
    recipient: str
    message_id: Optional[str] = None
    error: Optional[str] = None


class NotificationService:
    """
    Sends messages through an HTTP delivery gateway.

    Without a gateway URL and API key (local development) messages are only
    logged and recorded in ``sent_messages``. Delivery failures are reported
    in the returned ``DeliveryResult`` and never raised.
    """

    def __init__(
        self,
        gateway_url: str = None,
        api_key: str = None,
        from_email: str = None,
        from_phone: str = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            gateway_url: Delivery gateway base URL (defaults to env var NOTIFY_GATEWAY_URL)
            api_key: Gateway API key (defaults to env var NOTIFY_API_KEY)
            from_email: Sender address (defaults to env var NOTIFY_FROM_EMAIL)
            from_phone: Sender number (defaults to env var NOTIFY_FROM_PHONE)
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.gateway_url = gateway_url or os.getenv("NOTIFY_GATEWAY_URL", "")
        self.api_key = api_key or os.getenv("NOTIFY_API_KEY", "")
        self.from_email = from_email or os.getenv("NOTIFY_FROM_EMAIL", "noreply@group-scheduler.app")
        self.from_phone = from_phone or os.getenv("NOTIFY_FROM_PHONE", "")
        self.timeout = timeout
        self.transport = transport
        self.sent_messages: list[dict] = []

    @property
    def is_mock(self) -> bool:
        return not (self.gateway_url and self.api_key)

    def send_event_invitation(
        self,
        participant_name: str,
        event_name: str,
        creator_name: str,
        availability_url: str,
        email: Optional[str] = None,
        phone_number: Optional[str] = None
    ) -> list[DeliveryResult]:
        """Invite a participant to submit availability on every channel they have."""
        subject = f'{creator_name} invited you to "{event_name}"'
        text = f'{creator_name} invited you to "{event_name}". Submit your availability: {availability_url}'
        body = f"""Hi {participant_name},

{creator_name} has invited you to participate in the event "{event_name}".

Please use the link below to submit your availability:
{availability_url}

Thanks!"""

        return self._send_all(email, phone_number, subject, body, text)

    def send_event_confirmation(
        self,
        participant_name: str,
        event_name: str,
        start: datetime,
        end: datetime,
        message: Optional[str] = None,
        event_details_url: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None
    ) -> list[DeliveryResult]:
        """Tell a participant the time chosen for an event."""
        when = self._format_time_range(start, end)
        subject = f'"{event_name}" is confirmed for {when}'
        text = message or f'"{event_name}" is confirmed for {when}.'
        if event_details_url:
            text += f" Details: {event_details_url}"

        body = f"""Hi {participant_name},

{text}

📅 **When:** {when}
"""
        return self._send_all(email, phone_number, subject, body.strip(), text)

    def get_sent_messages(self) -> list[dict]:
        """Get all recorded messages."""
        return self.sent_messages.copy()

    def clear_messages(self):
        """Clear the message log (for testing/reset)."""
        self.sent_messages = []

    def _send_all(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        subject: str,
        body: str,
        sms_text: str
    ) -> list[DeliveryResult]:
        results = []
        if email:
            results.append(self._deliver("email", email, {"subject": subject, "body": body}))
        if phone_number:
            results.append(self._deliver("sms", phone_number, {"body": sms_text}))
        if not results:
            logger.debug("No contact details, nothing sent for: %s", subject)
        return results

    def _deliver(self, channel: Channel, recipient: str, content: dict) -> DeliveryResult:
        """Send one message, recording it and capturing any failure."""
        record = {
            "channel": channel,
            "to": recipient,
            "sent_at": datetime.now(pytz.UTC),
            **content
        }

        if self.is_mock:
            message_id = f"MOCK_{channel.upper()}_{uuid.uuid4().hex[:12]}"
            logger.info("MOCK %s to %s: %s", channel, recipient, content.get("subject") or content["body"])
            self.sent_messages.append({**record, "message_id": message_id})
            return DeliveryResult(success=True, channel=channel, recipient=recipient, message_id=message_id)

        payload = {
            "channel": channel,
            "to": recipient,
            "from": self.from_email if channel == "email" else self.from_phone,
            **content
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.gateway_url.rstrip('/')}/messages",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"}
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to send %s to %s: %s", channel, recipient, e)
            return DeliveryResult(success=False, channel=channel, recipient=recipient, error=str(e))

        if not isinstance(body, dict):
            error = f"Unexpected gateway response: {body!r}"
            logger.error("Failed to send %s to %s: %s", channel, recipient, error)
            return DeliveryResult(success=False, channel=channel, recipient=recipient, error=error)
        message_id = body.get("id")

        logger.info("Sent %s to %s: %s", channel, recipient, message_id)
        self.sent_messages.append({**record, "message_id": message_id})
        return DeliveryResult(success=True, channel=channel, recipient=recipient, message_id=message_id)

    @staticmethod
    def _format_time_range(start: datetime, end: datetime) -> str:
        if start.date() == end.date():
            return f"{start.strftime('%A, %B %d, %Y %I:%M %p')} - {end.strftime('%I:%M %p %Z')}".strip()
        return f"{start.strftime('%A, %B %d, %Y')} - {end.strftime('%A, %B %d, %Y')}"
