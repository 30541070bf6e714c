from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from utils.errors import InvalidStateError

DUE_NOW = "now"

Instant = Union[date, datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def due_date_from_interval(interval_days: int, reference: Instant) -> Instant:
    """Add whole calendar days to the reference instant.

    Arithmetic on an aware datetime keeps the wall-clock time in the
    reference's zone, so a 1-day interval lands on the same local time
    tomorrow across a daylight-saving change.
    """
    if isinstance(interval_days, bool) or not isinstance(interval_days, int):
        raise InvalidStateError(f"interval_days must be an integer, got {interval_days!r}")
    if interval_days < 0:
        raise InvalidStateError(f"interval_days must be non-negative, got {interval_days}")
    try:
        return reference + timedelta(days=interval_days)
    except OverflowError:
        raise InvalidStateError(
            f"interval of {interval_days} days from {reference} is past the last representable date"
        ) from None


def is_card_due(due: datetime, now: Optional[datetime] = None) -> bool:
    return due <= (now or utc_now())


def time_until_due(due: datetime, now: datetime) -> str:
    """Render the time left until ``due`` using its most significant unit.

    Returns "Nd", "Nh" or "Nm" (rounded down), "<1m" under a minute, and
    "now" once the card is already due.
    """
    remaining = due - now
    if remaining <= timedelta(0):
        return DUE_NOW
    if remaining.days >= 1:
        return f"{remaining.days}d"
    seconds = remaining.seconds
    if seconds >= 3600:
        return f"{seconds // 3600}h"
    if seconds >= 60:
        return f"{seconds // 60}m"
    return "<1m"


def to_storage(value: datetime) -> str:
    """Serialize an aware datetime as fixed-width UTC ISO-8601 text.

    Fixed width keeps lexicographic order equal to chronological order in SQL.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidStateError("due dates must be timezone-aware")
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_storage(text: str) -> datetime:
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        # Rows written by SQLite defaults (datetime('now')) are naive UTC
        value = value.replace(tzinfo=timezone.utc)
    return value
