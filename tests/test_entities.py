"""Tests for models/entities.py."""

from datetime import date, datetime

import pytest
import pytz

from models.entities import (
    EventDescriptor,
    HeatmapCell,
    ParticipantAvailability,
    Recommendation,
    parse_date,
    parse_datetime,
)

from helpers import TUESDAY, at


class TestParseDatetime:

    def test_utc_string(self):
        assert parse_datetime("2025-06-03T19:00:00Z") == at(TUESDAY, 19)

    def test_naive_string_is_localized(self):
        value = parse_datetime("2025-06-03T19:00:00", tz="America/New_York")
        assert value == at(TUESDAY, 23)
        assert value.hour == 19

    def test_fractional_seconds_with_offset(self):
        value = parse_datetime("2025-06-03T19:00:00.5+00:00")
        assert value == at(TUESDAY, 19).replace(microsecond=500000)

    def test_basic_format(self):
        assert parse_datetime("20250603T190000Z") == at(TUESDAY, 19)

    def test_aware_datetime_is_unchanged(self):
        value = at(TUESDAY, 9)
        assert parse_datetime(value) is value

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            parse_datetime("not a date")
        with pytest.raises(ValueError):
            parse_datetime(12345)


class TestParseDate:

    def test_accepts_dates_datetimes_and_strings(self):
        expected = date(2025, 6, 3)
        assert parse_date(expected) == expected
        assert parse_date(datetime(2025, 6, 3, 12)) == expected
        assert parse_date("2025-06-03") == expected
        assert parse_date("2025-06-03T00:00:00Z") == expected

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            parse_date("06/03/2025")


class TestEventDescriptor:

    def test_from_camel_case_record(self):
        event = EventDescriptor.from_record({
            "id": "evt_1",
            "name": "Offsite",
            "eventType": "multi-day",
            "availabilityStartDate": "2025-06-02T00:00:00Z",
            "availabilityEndDate": "2025-06-15T00:00:00Z",
            "eventLength": "1-week",
            "timingPreference": "weekends-only",
            "preferredTime": "",
        })

        assert event.event_type == "multi-day"
        assert not event.is_single_day
        assert event.availability_start == date(2025, 6, 2)
        assert event.availability_end == date(2025, 6, 15)
        assert event.event_length == "1-week"
        assert event.preferred_time is None
        assert event.timezone == "UTC"

    def test_from_snake_case_record_with_timezone(self):
        event = EventDescriptor.from_record({
            "id": "evt_2",
            "name": "Dinner",
            "event_type": "single-day",
            "availability_start": date(2025, 6, 2),
            "availability_end": date(2025, 6, 8),
            "duration": "3-hours",
        }, default_timezone="Europe/London")

        assert event.is_single_day
        assert event.duration == "3-hours"
        assert event.timezone == "Europe/London"

    def test_unknown_event_type(self):
        with pytest.raises(ValueError):
            EventDescriptor.from_record({
                "eventType": "weekly",
                "availabilityStartDate": "2025-06-02",
                "availabilityEndDate": "2025-06-08",
            })

    def test_missing_window(self):
        with pytest.raises(ValueError):
            EventDescriptor.from_record({"eventType": "single-day"})


class TestParticipantAvailability:

    def test_from_record_normalizes_slots(self):
        participant = ParticipantAvailability.from_record({
            "id": "p1",
            "name": "Alice",
            "phoneNumber": "+15550100001",
            "timeSlots": [
                {"startTime": "2025-06-03T19:00:00Z", "endTime": "2025-06-03T21:00:00Z"},
            ],
        })

        assert participant.has_responded
        assert participant.phone_number == "+15550100001"
        slot = participant.time_slots[0]
        assert slot.start == at(TUESDAY, 19)
        assert slot.end == at(TUESDAY, 21)
        assert slot.participant_id == "p1"
        assert slot.participant_name == "Alice"

    def test_explicit_response_flag_wins(self):
        participant = ParticipantAvailability.from_record({"id": "p1", "name": "Alice", "hasResponded": False})
        assert not participant.has_responded
        assert participant.time_slots == ()

    def test_missing_id(self):
        with pytest.raises(ValueError):
            ParticipantAvailability.from_record({"name": "Alice"})


def test_recommendation_to_dict():
    recommendation = Recommendation(
        start_time=at(TUESDAY, 19),
        end_time=at(TUESDAY, 21),
        available_participant_ids=("p1", "p2"),
        participant_names=("Alice", "Bob"),
        participant_count=2,
        conflict_participants=("Carol",),
        score=92,
        reasoning="2/3 participants (67%) are available"
    )

    assert recommendation.to_dict() == {
        "startTime": "2025-06-03T19:00:00+00:00",
        "endTime": "2025-06-03T21:00:00+00:00",
        "availableParticipants": ["p1", "p2"],
        "participantNames": ["Alice", "Bob"],
        "participantCount": 2,
        "conflictParticipants": ["Carol"],
        "score": 92,
        "reasoning": "2/3 participants (67%) are available",
    }


def test_heatmap_cell_without_respondents():
    cell = HeatmapCell(day=date(2025, 6, 3), period="Morning")
    assert cell.count == 0
    assert cell.percentage == 0
    assert cell.intensity == 0


def test_entities_are_immutable():
    event = EventDescriptor(
        id="evt_1",
        name="Dinner",
        event_type="single-day",
        availability_start=date(2025, 6, 2),
        availability_end=date(2025, 6, 8)
    )
    with pytest.raises(AttributeError):
        event.name = "Lunch"
