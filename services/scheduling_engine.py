"""Core scheduling algorithm."""

import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import pytz

from models.entities import (
    CandidateWindow,
    EventDescriptor,
    ParticipantAvailability,
    Recommendation,
    TimeSlot,
)
from services.parsers import parse_duration, parse_event_length

logger = logging.getLogger(__name__)

# Start-hour bands (inclusive start, exclusive end) for preferred times
PREFERRED_TIME_HOURS: dict[str, tuple[int, int]] = {
    "morning": (8, 12),
    "afternoon": (12, 17),
    "evening": (17, 22),
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def each_day(start: date, end: date) -> list[date]:
    """All calendar days from start to end, inclusive."""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def select_best_recommendations(
    candidates: Iterable[Recommendation],
    total_responded: int
) -> list[Recommendation]:
    """
    Pick which single-day recommendations to show.

    Multi-participant windows win over single-participant ones. When the best
    group reaches every respondent only the top window is returned; otherwise
    up to 3 of the best group are followed by up to 2 single-participant
    windows. Without any multi-participant window, up to 5 singles are shown.
    """
    ranked = sorted(candidates, key=lambda r: r.score, reverse=True)
    multi_participant = [r for r in ranked if r.participant_count > 1]
    single_participant = [r for r in ranked if r.participant_count == 1]

    if multi_participant:
        max_participants = max(r.participant_count for r in multi_participant)
        best = [r for r in multi_participant if r.participant_count == max_participants]

        if max_participants == total_responded:
            return best[:1]

        return best[:3] + single_participant[:2]

    # With a single respondent every window is already full attendance
    if total_responded == 1:
        return single_participant[:1]

    return single_participant[:5]


class SchedulingEngine:
    """Engine for ranking candidate meeting times from submitted availability."""

    def __init__(self, step_minutes: int = 30, max_multi_day_proposals: int = 5):
        """Initialize scheduling engine."""
        self.step = timedelta(minutes=step_minutes)
        self.max_multi_day_proposals = max_multi_day_proposals

    def find_optimal_times(
        self,
        event: EventDescriptor,
        participants: list[ParticipantAvailability]
    ) -> list[Recommendation]:
        """
        Find the best meeting times for an event.

        Args:
            event: Event being scheduled
            participants: All invitees, responded or not

        Returns:
            Recommendations sorted by score (best first)
        """
        responded = [p for p in participants if p.has_responded]
        if not responded:
            logger.debug("No respondents for event %s, nothing to recommend", event.id)
            return []

        if event.is_single_day:
            recommendations = self._find_single_day_options(event, responded)
        else:
            recommendations = self._find_multi_day_options(event, responded)

        logger.debug(
            "Event %s: %d recommendation(s) from %d respondent(s) of %d participant(s)",
            event.id, len(recommendations), len(responded), len(participants)
        )
        return recommendations

    # ------------------------------------------------------------------
    # Single-day events
    # ------------------------------------------------------------------

    def _find_single_day_options(
        self,
        event: EventDescriptor,
        responded: list[ParticipantAvailability]
    ) -> list[Recommendation]:
        """Score windows on every day of the availability window, then select."""
        tz = pytz.timezone(event.timezone)
        duration = timedelta(minutes=parse_duration(event.duration))

        recommendations = []
        for day in each_day(event.availability_start, event.availability_end):
            day_slots = self._get_availability_for_day(responded, day, tz)
            if not day_slots:
                continue

            for window in self._find_overlapping_windows(day_slots, duration):
                recommendations.append(
                    self._create_single_day_recommendation(event, window, responded, tz)
                )

        return select_best_recommendations(recommendations, len(responded))

    def _get_availability_for_day(
        self,
        responded: list[ParticipantAvailability],
        day: date,
        tz
    ) -> list[TimeSlot]:
        """Slots from any respondent whose start falls on the given day."""
        slots = []
        for participant in responded:
            for slot in participant.time_slots:
                if slot.start.astimezone(tz).date() == day:
                    slots.append(TimeSlot(
                        start=slot.start,
                        end=slot.end,
                        participant_id=participant.id,
                        participant_name=participant.name
                    ))
        return slots

    def _find_overlapping_windows(
        self,
        day_slots: list[TimeSlot],
        duration: timedelta
    ) -> list[CandidateWindow]:
        """Find windows of the given duration fully contained in some slot of each participant."""
        sorted_slots = sorted(day_slots, key=lambda s: s.start)

        # Slot starts plus half-hour steps while the meeting may still fit
        start_times = set()
        for slot in sorted_slots:
            start_times.add(slot.start)
            current = slot.start
            while current < slot.end - duration:
                current += self.step
                start_times.add(current)

        windows = []
        seen = set()
        for start_time in sorted(start_times):
            end_time = start_time + duration

            available = []
            for slot in sorted_slots:
                if slot.start <= start_time and slot.end >= end_time:
                    if slot.participant_id not in available:
                        available.append(slot.participant_id)

            if not available:
                continue

            key = (start_time, end_time, tuple(sorted(available)))
            if key in seen:
                continue
            seen.add(key)

            windows.append(CandidateWindow(
                start=start_time,
                end=end_time,
                participant_ids=tuple(sorted(available))
            ))

        return windows

    def _create_single_day_recommendation(
        self,
        event: EventDescriptor,
        window: CandidateWindow,
        responded: list[ParticipantAvailability],
        tz
    ) -> Recommendation:
        """Create a scored recommendation for a single-day window."""
        available = set(window.participant_ids)
        total = len(responded)
        count = len(window.participant_ids)
        local_start = window.start.astimezone(tz)

        names = sorted(p.name for p in responded if p.id in available)
        conflicts = [p.name for p in responded if p.id not in available]
        matches_preference = self._is_time_in_preferred_range(event, local_start)

        score = count / total * 100
        if matches_preference:
            score += 20
        # Round times (7:00 PM rather than 7:30 PM)
        if local_start.minute == 0:
            score += 5
        if is_weekend(local_start.date()):
            score += 10

        reasoning = f"{count}/{total} participants ({round_half_up(count / total * 100)}%) are available"
        if event.preferred_time and matches_preference:
            reasoning += f", matches preferred {event.preferred_time} time"
        if conflicts:
            reasoning += f". Conflicts: {', '.join(conflicts)}"

        return Recommendation(
            start_time=local_start,
            end_time=window.end.astimezone(tz),
            available_participant_ids=window.participant_ids,
            participant_names=tuple(names),
            participant_count=count,
            conflict_participants=tuple(conflicts),
            score=round_half_up(score),
            reasoning=reasoning
        )

    def _is_time_in_preferred_range(self, event: EventDescriptor, local_start: datetime) -> bool:
        """Whether a start time falls in the event's preferred band; no preference always matches."""
        band = PREFERRED_TIME_HOURS.get(event.preferred_time or "")
        if band is None:
            return True
        return band[0] <= local_start.hour < band[1]

    # ------------------------------------------------------------------
    # Multi-day events
    # ------------------------------------------------------------------

    def _find_multi_day_options(
        self,
        event: EventDescriptor,
        responded: list[ParticipantAvailability]
    ) -> list[Recommendation]:
        """Evaluate every contiguous span of the required length."""
        tz = pytz.timezone(event.timezone)
        required_days = parse_event_length(event.event_length)
        last_start_day = event.availability_end - timedelta(days=required_days - 1)

        recommendations = []
        for start_day in each_day(event.availability_start, last_start_day):
            end_day = start_day + timedelta(days=required_days - 1)
            recommendation = self._evaluate_multi_day_period(
                event, start_day, end_day, required_days, responded, tz
            )
            if recommendation:
                recommendations.append(recommendation)

        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:self.max_multi_day_proposals]

    def _evaluate_multi_day_period(
        self,
        event: EventDescriptor,
        start_day: date,
        end_day: date,
        required_days: int,
        responded: list[ParticipantAvailability],
        tz
    ) -> Optional[Recommendation]:
        """Score one span, or None when fewer than half its days have anyone available."""
        available_days = 0
        present: set[str] = set()

        for day in each_day(start_day, end_day):
            day_slots = self._get_availability_for_day(responded, day, tz)
            if day_slots:
                available_days += 1
                present.update(slot.participant_id for slot in day_slots)

        if available_days < math.ceil(required_days * 0.5):
            return None

        total = len(responded)
        count = len(present)

        score = count / total * 100
        score += available_days / required_days * 30
        if is_weekend(start_day) and event.timing_preference != "include-weekdays":
            score += 15

        percentage = round_half_up(count / total * 100)
        day_coverage = round_half_up(available_days / required_days * 100)

        return Recommendation(
            start_time=tz.localize(datetime.combine(start_day, time.min)),
            end_time=tz.localize(datetime.combine(end_day, time.max)),
            available_participant_ids=tuple(sorted(present)),
            participant_names=tuple(sorted(p.name for p in responded if p.id in present)),
            participant_count=count,
            conflict_participants=tuple(p.name for p in responded if p.id not in present),
            score=round_half_up(score),
            reasoning=f"{count}/{total} participants ({percentage}%) available, {day_coverage}% day coverage"
        )


def find_optimal_times(
    event: EventDescriptor,
    participants: list[ParticipantAvailability]
) -> list[Recommendation]:
    """Rank meeting times for an event with a default engine."""
    return SchedulingEngine().find_optimal_times(event, participants)
