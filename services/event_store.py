"""Persistence store for events, participants and finalized times."""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

import httpx
import pytz

from models.entities import EventDescriptor, FinalizedEvent, ParticipantAvailability, parse_datetime

logger = logging.getLogger(__name__)


class EventStoreError(Exception):
    """Base error raised by event stores."""


class EventNotFoundError(EventStoreError):
    """The requested event does not exist."""


class EventAlreadyFinalizedError(EventStoreError):
    """The event already has a finalized time."""


class EventStore(Protocol):
    """Narrow contract the scheduler needs from persistence."""

    def get_event(self, event_id: str) -> EventDescriptor:
        ...

    def get_participants(self, event_id: str) -> list[ParticipantAvailability]:
        ...

    def finalize_event(self, event_id: str, start: datetime, end: datetime) -> FinalizedEvent:
        ...


class InMemoryEventStore:
    """Store backed by dictionaries, for local development and tests."""

    def __init__(self):
        """Initialize an empty store."""
        self._events: dict[str, EventDescriptor] = {}
        self._participants: dict[str, list[ParticipantAvailability]] = {}
        self._finalized: dict[str, FinalizedEvent] = {}

    def add_event(
        self,
        event: EventDescriptor,
        participants: Optional[list[ParticipantAvailability]] = None
    ):
        """Register an event and its participants."""
        self._events[event.id] = event
        self._participants[event.id] = list(participants or [])

    def submit_availability(self, event_id: str, participant: ParticipantAvailability):
        """Replace a participant's submission (resubmitting overwrites earlier slots)."""
        participants = self.get_participants(event_id)
        for i, existing in enumerate(participants):
            if existing.id == participant.id:
                participants[i] = participant
                break
        else:
            participants.append(participant)
        self._participants[event_id] = participants

    def list_events(self) -> list[EventDescriptor]:
        return list(self._events.values())

    def get_event(self, event_id: str) -> EventDescriptor:
        event = self._events.get(event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    def get_participants(self, event_id: str) -> list[ParticipantAvailability]:
        self.get_event(event_id)
        return list(self._participants.get(event_id, []))

    def get_finalized(self, event_id: str) -> Optional[FinalizedEvent]:
        return self._finalized.get(event_id)

    def finalize_event(self, event_id: str, start: datetime, end: datetime) -> FinalizedEvent:
        self.get_event(event_id)
        if event_id in self._finalized:
            raise EventAlreadyFinalizedError(f"Event {event_id} is already finalized")

        finalized = FinalizedEvent(
            event_id=event_id,
            start=start,
            end=end,
            finalized_at=datetime.now(pytz.UTC)
        )
        self._finalized[event_id] = finalized
        logger.info("Event %s finalized for %s - %s", event_id, start.isoformat(), end.isoformat())
        return finalized


class EventStoreClient:
    """Client for the scheduler's HTTP persistence API."""

    def __init__(
        self,
        base_url: str = None,
        api_token: str = None,
        default_timezone: str = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the store client.

        Args:
            base_url: API base URL (defaults to env var SCHEDULER_STORE_URL)
            api_token: Bearer token (defaults to env var SCHEDULER_STORE_TOKEN)
            default_timezone: Timezone for naive timestamps (defaults to env var SCHEDULER_TIMEZONE)
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or os.getenv("SCHEDULER_STORE_URL", "")).rstrip("/")
        if not self.base_url:
            raise ValueError("An event store URL is required")
        self.api_token = api_token or os.getenv("SCHEDULER_STORE_TOKEN", "")
        self.default_timezone = default_timezone or os.getenv("SCHEDULER_TIMEZONE", "UTC")
        self.timeout = timeout
        self.transport = transport

        # Cache for raw event records
        self._event_cache: Dict[str, Dict[str, Any]] = {}

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, mapping HTTP and transport failures to store errors."""
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=self._get_headers(),
                    **kwargs
                )
                if response.status_code == 404:
                    raise EventNotFoundError(f"Not found: {path}")
                if response.status_code == 409:
                    raise EventAlreadyFinalizedError(f"Conflict: {path}")
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            logger.error("Event store returned %s for %s %s", e.response.status_code, method, path)
            raise EventStoreError(f"Event store request failed: {e}") from e
        except httpx.RequestError as e:
            logger.error("Event store unreachable for %s %s: %s", method, path, e)
            raise EventStoreError(f"Event store unreachable: {e}") from e

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send a request and decode its JSON object body."""
        response = self._send(method, path, **kwargs)
        try:
            body = response.json()
        except ValueError as e:
            logger.error("Event store sent a non-JSON body for %s %s", method, path)
            raise EventStoreError(f"Invalid response from event store: {e}") from e
        if not isinstance(body, dict):
            logger.error("Event store sent a %s body for %s %s", type(body).__name__, method, path)
            raise EventStoreError("Invalid response from event store: expected a JSON object")
        return body

    def _fetch_event_record(self, event_id: str, use_cache: bool = True) -> Dict[str, Any]:
        if use_cache and event_id in self._event_cache:
            return self._event_cache[event_id]

        result = self._request("GET", f"/events/{event_id}")
        record = result.get("event", result)
        if not isinstance(record, dict):
            raise EventStoreError(f"Invalid event record for {event_id}")
        self._event_cache[event_id] = record
        return record

    def _parse_event(self, event_id: str, record: Dict[str, Any]) -> EventDescriptor:
        try:
            return EventDescriptor.from_record(record, default_timezone=self.default_timezone)
        except ValueError as e:
            logger.error("Malformed event record %s: %s", event_id, e)
            raise EventStoreError(f"Invalid event record for {event_id}: {e}") from e

    def get_event(self, event_id: str) -> EventDescriptor:
        return self._parse_event(event_id, self._fetch_event_record(event_id, use_cache=False))

    def get_participants(self, event_id: str) -> List[ParticipantAvailability]:
        record = self._fetch_event_record(event_id)
        event = self._parse_event(event_id, record)

        participants = []
        for raw in record.get("participants", []):
            try:
                participants.append(ParticipantAvailability.from_record(raw, tz=event.timezone))
            except ValueError as e:
                # One malformed submission must not hide everyone else's
                logger.warning("Skipping malformed participant record on event %s: %s", event_id, e)
        return participants

    def finalize_event(self, event_id: str, start: datetime, end: datetime) -> FinalizedEvent:
        response = self._send(
            "POST",
            f"/events/{event_id}/finalize",
            json={"finalStartDate": start.isoformat(), "finalEndDate": end.isoformat()}
        )
        self._event_cache.pop(event_id, None)

        # The finalize is stored once the POST succeeds; a bad body only loses the timestamp
        finalized_at = datetime.now(pytz.UTC)
        try:
            result = response.json()
            event_data = result.get("event") or {}
            if event_data.get("updatedAt"):
                finalized_at = parse_datetime(event_data["updatedAt"])
        except (ValueError, AttributeError) as e:
            logger.warning("Could not read finalize timestamp for event %s: %s", event_id, e)

        return FinalizedEvent(event_id=event_id, start=start, end=end, finalized_at=finalized_at)
