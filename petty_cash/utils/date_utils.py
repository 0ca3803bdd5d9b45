"""Date manipulation utilities"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time"""
    return datetime.now(timezone.utc)


def is_same_month(day: date, reference: date) -> bool:
    """True when both dates fall in the same calendar month"""
    return (day.year, day.month) == (reference.year, reference.month)
