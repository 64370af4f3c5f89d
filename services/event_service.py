"""Event workflows: recommend, show availability, finalize, export."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.entities import FinalizedEvent, HeatmapCell, Recommendation
from services.availability_aggregator import AvailabilityAggregator
from services.calendar_service import CalendarService
from services.event_store import EventStore
from services.notification_service import DeliveryResult, NotificationService
from services.scheduling_engine import SchedulingEngine

logger = logging.getLogger(__name__)


@dataclass
class FinalizeResult:
    """A finalized event plus the outcome of every confirmation sent."""
    finalized: FinalizedEvent
    deliveries: list[DeliveryResult] = field(default_factory=list)

    @property
    def failed_deliveries(self) -> list[DeliveryResult]:
        return [d for d in self.deliveries if not d.success]


class EventService:
    """Glue between the event store and the scheduling components."""

    def __init__(
        self,
        store: EventStore,
        engine: Optional[SchedulingEngine] = None,
        aggregator: Optional[AvailabilityAggregator] = None,
        notifier: Optional[NotificationService] = None,
        calendar_service: Optional[CalendarService] = None
    ):
        """Initialize with a store and optional collaborators."""
        self.store = store
        self.engine = engine or SchedulingEngine()
        self.aggregator = aggregator or AvailabilityAggregator()
        self.notifier = notifier or NotificationService()
        self.calendar_service = calendar_service or CalendarService()

    def get_recommendations(self, event_id: str, limit: Optional[int] = None) -> list[Recommendation]:
        """Ranked meeting times for an event, optionally truncated."""
        event = self.store.get_event(event_id)
        participants = self.store.get_participants(event_id)

        recommendations = self.engine.find_optimal_times(event, participants)
        logger.info(
            "Event %s: %d recommendation(s), %d of %d participant(s) responded",
            event_id,
            len(recommendations),
            sum(1 for p in participants if p.has_responded),
            len(participants)
        )
        return recommendations[:limit] if limit is not None else recommendations

    def get_heatmap(self, event_id: str) -> list[HeatmapCell]:
        event = self.store.get_event(event_id)
        return self.aggregator.build_heatmap(event, self.store.get_participants(event_id))

    def finalize(
        self,
        event_id: str,
        start: datetime,
        end: datetime,
        message: Optional[str] = None,
        event_details_url: Optional[str] = None
    ) -> FinalizeResult:
        """
        Persist the chosen time, then notify participants.

        The store write happens first; delivery failures are collected on the
        result and never undo the finalized time.
        """
        if end <= start:
            raise ValueError("Finalized end time must be after its start time")

        event = self.store.get_event(event_id)
        finalized = self.store.finalize_event(event_id, start, end)
        result = FinalizeResult(finalized=finalized)

        for participant in self.store.get_participants(event_id):
            if not (participant.email or participant.phone_number):
                continue
            result.deliveries.extend(self.notifier.send_event_confirmation(
                participant_name=participant.name,
                event_name=event.name,
                start=start,
                end=end,
                message=message,
                event_details_url=event_details_url,
                email=participant.email,
                phone_number=participant.phone_number
            ))

        if result.failed_deliveries:
            logger.warning(
                "Event %s finalized but %d confirmation(s) failed",
                event_id, len(result.failed_deliveries)
            )
        return result

    def export_calendar(self, event_id: str, finalized: FinalizedEvent) -> tuple[str, str]:
        """Return (filename, ics_text) for a finalized event."""
        if finalized.event_id != event_id:
            raise ValueError(f"Finalized time belongs to event {finalized.event_id}, not {event_id}")

        event = self.store.get_event(event_id)
        attendees = [
            p.email for p in self.store.get_participants(event_id)
            if p.email and p.has_responded
        ]
        ics = self.calendar_service.generate_ics(
            event_id=event.id,
            event_name=event.name,
            start=finalized.start,
            end=finalized.end,
            description=event.description,
            attendee_emails=attendees
        )
        return self.calendar_service.generate_ics_filename(event.name), ics
