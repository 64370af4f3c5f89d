"""Availability heatmap: respondents per day and time period."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pytz

from models.entities import EventDescriptor, HeatmapCell, ParticipantAvailability, TimeSlot
from services.scheduling_engine import each_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimePeriod:
    """A labelled hour range shown as one heatmap row."""
    label: str
    start_hour: int
    end_hour: int

    @property
    def is_all_day(self) -> bool:
        return self.start_hour == 0 and self.end_hour == 24


SINGLE_DAY_PERIODS = (
    TimePeriod("Morning", 9, 12),
    TimePeriod("Afternoon", 13, 17),
    TimePeriod("Evening", 18, 22),
)

MULTI_DAY_PERIODS = (
    TimePeriod("All Day", 0, 24),
)


class AvailabilityAggregator:
    """Counts available respondents per (day, period) for display."""

    def periods_for(self, event: EventDescriptor) -> tuple[TimePeriod, ...]:
        return SINGLE_DAY_PERIODS if event.is_single_day else MULTI_DAY_PERIODS

    def build_heatmap(
        self,
        event: EventDescriptor,
        participants: list[ParticipantAvailability]
    ) -> list[HeatmapCell]:
        """
        Build every cell of the heatmap, day by day.

        Unlike the scheduling engine, a participant counts for a period when
        any of their slots merely overlaps it.
        """
        responded = [p for p in participants if p.has_responded]
        tz = pytz.timezone(event.timezone)

        cells = []
        for day in each_day(event.availability_start, event.availability_end):
            for period in self.periods_for(event):
                cells.append(self._build_cell(responded, day, period, tz))

        logger.debug(
            "Built %d heatmap cell(s) for event %s with %d respondent(s)",
            len(cells), event.id, len(responded)
        )
        return cells

    def get_cell(
        self,
        event: EventDescriptor,
        participants: list[ParticipantAvailability],
        day: date,
        period_label: str
    ) -> Optional[HeatmapCell]:
        """Look up a single cell, e.g. when the organizer clicks it."""
        for period in self.periods_for(event):
            if period.label == period_label:
                responded = [p for p in participants if p.has_responded]
                return self._build_cell(responded, day, period, pytz.timezone(event.timezone))
        return None

    def summarize_by_day(
        self,
        event: EventDescriptor,
        participants: list[ParticipantAvailability]
    ) -> dict[date, dict[str, int]]:
        """Available counts keyed by day, then period label."""
        summary: dict[date, dict[str, int]] = {}
        for cell in self.build_heatmap(event, participants):
            summary.setdefault(cell.day, {})[cell.period] = cell.count
        return summary

    def _build_cell(
        self,
        responded: list[ParticipantAvailability],
        day: date,
        period: TimePeriod,
        tz
    ) -> HeatmapCell:
        available = []
        unavailable = []
        for participant in responded:
            # Each participant is counted once per cell
            if any(
                slot.start.astimezone(tz).date() == day and self._slot_overlaps_period(slot, period, tz)
                for slot in participant.time_slots
            ):
                available.append(participant.name)
            else:
                unavailable.append(participant.name)

        return HeatmapCell(
            day=day,
            period=period.label,
            available_names=available,
            unavailable_names=unavailable,
            total_respondents=len(responded)
        )

    @staticmethod
    def _slot_overlaps_period(slot: TimeSlot, period: TimePeriod, tz) -> bool:
        """Hour-granularity overlap between a slot and a period."""
        if period.is_all_day:
            return True

        start_hour = slot.start.astimezone(tz).hour
        end_hour = slot.end.astimezone(tz).hour

        return (
            (start_hour < period.end_hour and end_hour > period.start_hour)
            or period.start_hour <= start_hour < period.end_hour
            or period.start_hour < end_hour <= period.end_hour
        )
