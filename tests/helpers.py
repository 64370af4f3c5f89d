"""Date helpers for building test availability."""

from datetime import datetime

import pytz

# June 2025: the 2nd is a Monday, the 7th and 8th a weekend
MONDAY = 2
TUESDAY = 3
SATURDAY = 7
SUNDAY = 8


def at(day: int, hour: int, minute: int = 0, tz: str = "UTC") -> datetime:
    """Aware datetime in June 2025."""
    return pytz.timezone(tz).localize(datetime(2025, 6, day, hour, minute))
