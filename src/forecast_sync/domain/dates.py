from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_day(value: datetime | int | float, reference_tz: tzinfo) -> date:
    """Map an instant (datetime or unix seconds) onto its calendar day in ``reference_tz``."""
    if isinstance(value, datetime):
        instant = normalize_datetime(value)
    else:
        instant = datetime.fromtimestamp(float(value), tz=timezone.utc)
    return instant.astimezone(reference_tz).date()


def today(reference_tz: tzinfo, *, now: datetime | None = None) -> date:
    return normalize_day(now or utc_now(), reference_tz)
