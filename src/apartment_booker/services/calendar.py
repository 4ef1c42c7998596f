"""iCalendar export of the booking planning."""

from collections.abc import Iterable
from datetime import UTC, datetime

from apartment_booker.domain.reservations import Reservation

PRODUCT_ID = "-//apartmentBooker//FR"
UID_DOMAIN = "apartmentBooker"
DEFAULT_SUMMARY = "Reservation"


def format_ics_time(value: datetime) -> str:
    """Format a datetime as an iCalendar UTC date-time."""
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def escape_ics(value: str) -> str:
    """Escape a TEXT value per RFC 5545."""
    escaped = value.replace("\\", "\\\\")
    escaped = escaped.replace("\n", "\\n")
    escaped = escaped.replace(",", "\\,")
    return escaped.replace(";", "\\;")


def render_calendar(
    reservations: Iterable[Reservation], now: datetime | None = None
) -> str:
    """Render reservations as a VCALENDAR document with CRLF line endings."""
    stamp = format_ics_time(now or datetime.now(tz=UTC))
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    for reservation in reservations:
        summary = escape_ics(reservation.person.strip() or DEFAULT_SUMMARY)
        description = summary
        comment = reservation.comment.strip()
        if comment:
            description = f"{summary}\\n{escape_ics(comment)}"
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{reservation.id}@{UID_DOMAIN}",
                f"DTSTAMP:{stamp}",
                f"DTSTART:{format_ics_time(reservation.start)}",
                f"DTEND:{format_ics_time(reservation.end)}",
                f"SUMMARY:{summary}",
                f"DESCRIPTION:{description}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return "".join(f"{line}\r\n" for line in lines)
