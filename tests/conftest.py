"""Shared fixtures for the scheduler tests."""

from datetime import date

import pytest

from models.entities import EventDescriptor, ParticipantAvailability, TimeSlot


@pytest.fixture
def make_event():
    """Factory for events with a June 2-8 2025 window by default."""
    def _make_event(**overrides) -> EventDescriptor:
        fields = {
            "id": "evt_1",
            "name": "Team Dinner",
            "event_type": "single-day",
            "availability_start": date(2025, 6, 2),
            "availability_end": date(2025, 6, 8),
        }
        fields.update(overrides)
        return EventDescriptor(**fields)
    return _make_event


@pytest.fixture
def make_participant():
    """Factory for participants; slots are (start, end) datetime pairs."""
    def _make_participant(
        participant_id: str,
        name: str,
        slots=(),
        has_responded=None,
        **extra
    ) -> ParticipantAvailability:
        time_slots = tuple(
            TimeSlot(start=start, end=end, participant_id=participant_id, participant_name=name)
            for start, end in slots
        )
        return ParticipantAvailability(
            id=participant_id,
            name=name,
            has_responded=bool(time_slots) if has_responded is None else has_responded,
            time_slots=time_slots,
            **extra
        )
    return _make_participant
