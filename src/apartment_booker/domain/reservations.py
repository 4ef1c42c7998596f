"""Domain models for reservations."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class Reservation:
    """Represents a stored reservation."""

    id: int
    person: str
    start: datetime
    end: datetime
    comment: str = ""


def format_timestamp(value: datetime) -> str:
    """Encode an aware datetime as fixed-width RFC 3339 UTC text.

    Second precision and a four-digit year keep the text sortable; lexical
    order equals chronological order.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("timestamp must carry a time zone")
    try:
        utc_value = value.astimezone(UTC)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {value!r}") from exc
    return (
        f"{utc_value.year:04d}-{utc_value.month:02d}-{utc_value.day:02d}"
        f"T{utc_value.hour:02d}:{utc_value.minute:02d}:{utc_value.second:02d}Z"
    )


def parse_timestamp(raw: str) -> datetime:
    """Parse RFC 3339 text into an aware UTC datetime truncated to seconds.

    Raises ValueError for malformed text and for instants that fall outside
    the representable UTC range.
    """
    text = raw.strip()
    if "T" not in text and "t" not in text:
        raise ValueError(f"not an RFC 3339 timestamp: {raw!r}")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise ValueError(f"timestamp has no offset: {raw!r}")
    try:
        return parsed.astimezone(UTC).replace(microsecond=0)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {raw!r}") from exc
