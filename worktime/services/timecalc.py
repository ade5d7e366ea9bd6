from __future__ import annotations

from datetime import datetime, timezone


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Fixed-width UTC ISO-8601 text, e.g. ``2024-05-01T09:00:00.000Z``.

    Every stored timestamp goes through here so string order equals time order.
    """
    return as_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(ts: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string. Naive values are taken as UTC."""
    if not ts:
        return None
    return as_utc(datetime.fromisoformat(ts.replace("Z", "+00:00")))


def utcnow_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def seconds_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds()
