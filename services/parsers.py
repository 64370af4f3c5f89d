"""Lookup tables for symbolic duration and event-length codes."""

from typing import Optional


DEFAULT_DURATION_MINUTES = 120
DEFAULT_EVENT_LENGTH_DAYS = 2

DURATION_MINUTES: dict[str, int] = {
    "1-hour": 60,
    "2-hours": 120,
    "3-hours": 180,
    "4-hours": 240,
    "all-day": 480,  # 8 hours
}

EVENT_LENGTH_DAYS: dict[str, int] = {
    "2-days": 2,
    "3-days": 3,
    "1-week": 7,
    "2-weeks": 14,
}


def parse_duration(duration: Optional[str]) -> int:
    """Map a duration code to minutes, falling back to 2 hours."""
    if not duration:
        return DEFAULT_DURATION_MINUTES
    return DURATION_MINUTES.get(duration, DEFAULT_DURATION_MINUTES)


def parse_event_length(event_length: Optional[str]) -> int:
    """Map an event-length code to a number of consecutive days, falling back to 2."""
    if not event_length:
        return DEFAULT_EVENT_LENGTH_DAYS
    return EVENT_LENGTH_DAYS.get(event_length, DEFAULT_EVENT_LENGTH_DAYS)
