"""UTC datetime utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> float:
    """Fractional minutes from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).total_seconds() / 60


def utc_date(moment: datetime) -> date:
    """Calendar date of ``moment`` in UTC. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive values; convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
