"""Synthetic events and responses for the demo dashboard."""

from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from models.entities import EventDescriptor, ParticipantAvailability, TimeSlot
from services.event_store import InMemoryEventStore


def _slot(tz, day: date, start_hour: int, end_hour: int, participant_id: str, name: str) -> TimeSlot:
    """Slot on a day between two local hours."""
    start = tz.localize(datetime.combine(day, time(start_hour, 0)))
    end = tz.localize(datetime.combine(day, time(end_hour, 0)))
    return TimeSlot(start=start, end=end, participant_id=participant_id, participant_name=name)


def _participant(
    participant_id: str,
    name: str,
    slots: list[tuple[date, int, int]],
    tz,
    email: Optional[str] = None,
    phone_number: Optional[str] = None
) -> ParticipantAvailability:
    return ParticipantAvailability(
        id=participant_id,
        name=name,
        has_responded=bool(slots),
        time_slots=tuple(_slot(tz, day, s, e, participant_id, name) for day, s, e in slots),
        email=email,
        phone_number=phone_number
    )


def build_demo_store(today: Optional[date] = None, timezone: str = "UTC") -> InMemoryEventStore:
    """Seed a store with one single-day and one multi-day event."""
    today = today or date.today()
    tz = pytz.timezone(timezone)
    store = InMemoryEventStore()

    # Next Monday, so the window always holds a weekend
    monday = today + timedelta(days=(7 - today.weekday()) % 7 or 7)
    tuesday = monday + timedelta(days=1)
    saturday = monday + timedelta(days=5)

    dinner = EventDescriptor(
        id="evt_dinner",
        name="Team Dinner",
        event_type="single-day",
        availability_start=monday,
        availability_end=monday + timedelta(days=6),
        preferred_time="evening",
        duration="2-hours",
        description="Quarterly team dinner",
        timezone=timezone
    )
    store.add_event(dinner, [
        _participant("p_001", "Rajesh Kumar", [(tuesday, 18, 22), (saturday, 17, 21)], tz,
                     email="rajesh.kumar@example.com"),
        _participant("p_002", "Priya Sharma", [(tuesday, 19, 22)], tz,
                     email="priya.sharma@example.com", phone_number="+15550100002"),
        _participant("p_003", "Michael Chen", [(saturday, 18, 21), (tuesday, 12, 14)], tz,
                     email="michael.chen@example.com"),
        _participant("p_004", "Sarah Johnson", [], tz, email="sarah.johnson@example.com"),
    ])

    offsite = EventDescriptor(
        id="evt_offsite",
        name="Planning Offsite",
        event_type="multi-day",
        availability_start=monday,
        availability_end=monday + timedelta(days=13),
        event_length="3-days",
        timing_preference="flexible",
        timezone=timezone
    )
    store.add_event(offsite, [
        _participant("p_001", "Rajesh Kumar",
                     [(saturday, 0, 23), (saturday + timedelta(days=1), 0, 23)], tz,
                     email="rajesh.kumar@example.com"),
        _participant("p_005", "Emma Wilson",
                     [(saturday + timedelta(days=1), 9, 17), (saturday + timedelta(days=2), 9, 17)], tz,
                     phone_number="+15550100005"),
        _participant("p_006", "Amit Patel", [(tuesday, 9, 17)], tz),
    ])

    return store
