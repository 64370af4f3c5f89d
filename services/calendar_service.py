"""Calendar export: RFC 5545 (.ics) files for finalized events."""

import re
from datetime import datetime
from typing import Optional

import pytz

ICS_LINE_LIMIT = 75
PRODID = "-//Group Scheduler//Event Scheduler//EN"
UID_DOMAIN = "group-scheduler.app"


def format_ics_date(value: datetime) -> str:
    """Format a datetime as an ICS UTC timestamp (YYYYMMDDTHHMMSSZ)."""
    if value.tzinfo is None:
        value = pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC).strftime("%Y%m%dT%H%M%SZ")


def escape_ics_text(text: str) -> str:
    """Escape backslash, semicolon, comma and newline; drop carriage returns."""
    return (
        text.replace("\\", "\\\\")  # must go first
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
        .replace("\r", "")
    )


def fold_line(line: str) -> str:
    """Fold a content line at 75 characters; continuation lines start with a space."""
    if len(line) <= ICS_LINE_LIMIT:
        return line

    lines = []
    current = line
    while len(current) > ICS_LINE_LIMIT:
        lines.append(current[:ICS_LINE_LIMIT])
        current = " " + current[ICS_LINE_LIMIT:]
    lines.append(current)
    return "\r\n".join(lines)


class CalendarService:
    """Builds calendar files for a finalized start/end time."""

    def generate_ics(
        self,
        event_id: str,
        event_name: str,
        start: datetime,
        end: datetime,
        description: Optional[str] = None,
        location: Optional[str] = None,
        organizer_email: Optional[str] = None,
        organizer_name: Optional[str] = None,
        attendee_emails: Optional[list[str]] = None,
        now: Optional[datetime] = None
    ) -> str:
        """
        Generate RFC 5545 calendar text for one event.

        Args:
            event_id: Event id, used for a stable UID
            event_name: Summary line
            start: Finalized start time
            end: Finalized end time
            description: Optional description
            location: Optional location
            organizer_email: Optional organizer address
            organizer_name: Optional organizer display name
            attendee_emails: Attendee addresses
            now: Timestamp for DTSTAMP (defaults to the current UTC time)

        Returns:
            CRLF-delimited calendar text
        """
        dtstamp = format_ics_date(now or datetime.now(pytz.UTC))

        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{PRODID}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
            "BEGIN:VEVENT",
            f"UID:event-{event_id}@{UID_DOMAIN}",
            f"DTSTAMP:{dtstamp}",
            f"DTSTART:{format_ics_date(start)}",
            f"DTEND:{format_ics_date(end)}",
            f"SUMMARY:{escape_ics_text(event_name)}",
        ]

        if description:
            lines.append(f"DESCRIPTION:{escape_ics_text(description)}")
        if location:
            lines.append(f"LOCATION:{escape_ics_text(location)}")

        if organizer_email:
            if organizer_name:
                lines.append(f"ORGANIZER;CN={escape_ics_text(organizer_name)}:mailto:{organizer_email}")
            else:
                lines.append(f"ORGANIZER:mailto:{organizer_email}")

        for email in attendee_emails or []:
            lines.append(f"ATTENDEE;ROLE=REQ-PARTICIPANT;RSVP=FALSE:mailto:{email}")

        lines.extend([
            "SEQUENCE:0",
            "STATUS:CONFIRMED",
            "TRANSP:OPAQUE",
            "END:VEVENT",
            "END:VCALENDAR",
        ])

        return "\r\n".join(fold_line(line) for line in lines) + "\r\n"

    def generate_ics_bytes(self, *args, **kwargs) -> bytes:
        """Calendar text encoded for download or as an email attachment."""
        return self.generate_ics(*args, **kwargs).encode("utf-8")

    @staticmethod
    def generate_ics_filename(event_name: str) -> str:
        """Safe download filename for an event's calendar file."""
        safe_name = re.sub(r"[^a-zA-Z0-9\s-]", "", event_name)
        safe_name = re.sub(r"\s+", "-", safe_name)[:50]
        return f"{safe_name or 'event'}.ics"
