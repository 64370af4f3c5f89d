"""Domain models for the Group Scheduler."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

import pytz
from dateutil.parser import isoparse


EventType = Literal["single-day", "multi-day"]
PreferredTime = Literal["morning", "afternoon", "evening", "all-day"]
TimingPreference = Literal["weekends-only", "include-weekdays", "flexible"]


def _get_field(record: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Helper to get value with multiple field name variations."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return default


def parse_datetime(value: Any, tz: str = "UTC") -> datetime:
    """
    Normalize a datetime or ISO-8601 string into a tz-aware datetime.

    Naive values are localized to ``tz``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = isoparse(value.strip())
        except ValueError:
            raise ValueError(f"Invalid datetime value: {value!r}")
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")

    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz).localize(parsed)
    return parsed


def parse_date(value: Any) -> date:
    """Normalize a date, datetime or ISO-8601 string into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Full timestamps ("2025-06-03T00:00:00.000Z") keep only the date part
        try:
            return isoparse(value.strip()).date()
        except ValueError:
            raise ValueError(f"Invalid date value: {value!r}")
    raise ValueError(f"Unsupported date value: {value!r}")


@dataclass(frozen=True)
class EventDescriptor:
    """Represents an event being scheduled."""
    id: str
    name: str
    event_type: EventType
    availability_start: date
    availability_end: date
    preferred_time: Optional[str] = None  # single-day only
    duration: Optional[str] = None  # single-day only, e.g. "2-hours"
    event_length: Optional[str] = None  # multi-day only, e.g. "3-days"
    timing_preference: Optional[str] = None  # multi-day only
    description: Optional[str] = None
    timezone: str = "UTC"

    @property
    def is_single_day(self) -> bool:
        return self.event_type == "single-day"

    @classmethod
    def from_record(cls, record: dict[str, Any], default_timezone: str = "UTC") -> "EventDescriptor":
        """Build an event from a store record (camelCase or snake_case keys)."""
        event_type = _get_field(record, "eventType", "event_type")
        if event_type not in ("single-day", "multi-day"):
            raise ValueError(f"Unknown event type: {event_type!r}")

        start = _get_field(record, "availabilityStartDate", "availability_start")
        end = _get_field(record, "availabilityEndDate", "availability_end")
        if start is None or end is None:
            raise ValueError("Event record is missing its availability window")

        return cls(
            id=str(_get_field(record, "id", default="")),
            name=str(_get_field(record, "name", default="")),
            event_type=event_type,
            availability_start=parse_date(start),
            availability_end=parse_date(end),
            preferred_time=_get_field(record, "preferredTime", "preferred_time"),
            duration=_get_field(record, "duration"),
            event_length=_get_field(record, "eventLength", "event_length"),
            timing_preference=_get_field(record, "timingPreference", "timing_preference"),
            description=_get_field(record, "description"),
            timezone=_get_field(record, "timezone", default=default_timezone),
        )


@dataclass(frozen=True)
class TimeSlot:
    """A [start, end) span a participant claims to be free."""
    start: datetime
    end: datetime
    participant_id: str
    participant_name: Optional[str] = None


@dataclass(frozen=True)
class ParticipantAvailability:
    """Represents an invitee and their submitted availability."""
    id: str
    name: str
    has_responded: bool
    time_slots: tuple[TimeSlot, ...] = ()
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict[str, Any], tz: str = "UTC") -> "ParticipantAvailability":
        """Build a participant from a store record, normalizing its slot times."""
        participant_id = str(_get_field(record, "id", default=""))
        if not participant_id:
            raise ValueError("Participant record is missing an id")
        name = str(_get_field(record, "name", default=""))

        slots = []
        for raw_slot in _get_field(record, "timeSlots", "time_slots", default=[]):
            slots.append(TimeSlot(
                start=parse_datetime(_get_field(raw_slot, "startTime", "start"), tz),
                end=parse_datetime(_get_field(raw_slot, "endTime", "end"), tz),
                participant_id=participant_id,
                participant_name=name
            ))

        has_responded = _get_field(record, "hasResponded", "has_responded")
        if has_responded is None:
            has_responded = bool(slots)

        return cls(
            id=participant_id,
            name=name,
            has_responded=bool(has_responded),
            time_slots=tuple(slots),
            email=_get_field(record, "email"),
            phone_number=_get_field(record, "phoneNumber", "phone_number"),
        )


@dataclass(frozen=True)
class CandidateWindow:
    """A concrete window being evaluated, with the participants covering it."""
    start: datetime
    end: datetime
    participant_ids: tuple[str, ...]


@dataclass(frozen=True)
class Recommendation:
    """A scored, ranked meeting time."""
    start_time: datetime
    end_time: datetime
    available_participant_ids: tuple[str, ...]
    participant_names: tuple[str, ...]
    participant_count: int
    conflict_participants: tuple[str, ...]
    score: int
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view using the keys the HTTP layer exposes."""
        return {
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "availableParticipants": list(self.available_participant_ids),
            "participantNames": list(self.participant_names),
            "participantCount": self.participant_count,
            "conflictParticipants": list(self.conflict_participants),
            "score": self.score,
            "reasoning": self.reasoning,
        }


@dataclass
class HeatmapCell:
    """Availability of respondents for one (day, period) cell."""
    day: date
    period: str
    available_names: list[str] = field(default_factory=list)
    unavailable_names: list[str] = field(default_factory=list)
    total_respondents: int = 0

    @property
    def count(self) -> int:
        return len(self.available_names)

    @property
    def percentage(self) -> int:
        if not self.total_respondents:
            return 0
        return int(self.count / self.total_respondents * 100 + 0.5)

    @property
    def intensity(self) -> int:
        """Colour bucket 0-4 used by the heatmap view."""
        if not self.total_respondents or not self.count:
            return 0
        ratio = self.count / self.total_respondents
        if ratio < 0.25:
            return 1
        if ratio < 0.5:
            return 2
        if ratio < 0.75:
            return 3
        return 4


@dataclass
class FinalizedEvent:
    """The time chosen for an event, as recorded by the store."""
    event_id: str
    start: datetime
    end: datetime
    finalized_at: datetime
