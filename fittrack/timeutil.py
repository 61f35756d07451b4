from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

DAY_MS = 86_400_000


def local_now() -> datetime:
    return datetime.now().astimezone()


def as_local(dt: datetime) -> datetime:
    # Naive datetimes are taken to be local wall-clock time. The offset is
    # resolved per instant so DST changes land on the right side.
    return dt.astimezone()


def parse_iso(s: str | None) -> datetime | None:
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def coerce_datetime(raw: object) -> datetime | None:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime.combine(raw, time.min)
    if isinstance(raw, str):
        return parse_iso(raw)
    return None


def local_date_key(dt: datetime) -> str:
    return as_local(dt).date().isoformat()


def local_midnight(d: date) -> datetime:
    return datetime.combine(d, time.min).astimezone()


def subtract_months(dt: datetime, months: int) -> datetime:
    """Calendar-aware month subtraction.

    The day is clamped to the last day of the target month, so 31 Mar minus one
    month is the end of February rather than rolling over into March.
    """
    total = dt.year * 12 + (dt.month - 1) - months
    year, month0 = divmod(total, 12)
    month = month0 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def subtract_lookback(dt: datetime, unit: str, amount: int) -> datetime:
    if unit == "days":
        return dt - timedelta(days=amount)
    if unit == "months":
        return subtract_months(dt, amount)
    if unit == "years":
        return subtract_months(dt, amount * 12)
    raise ValueError(f"Unknown lookback unit: {unit}")


def elapsed_ms(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() * 1000.0


def local_lookback(now: datetime, unit: str, amount: int) -> datetime:
    """Subtract on the local wall clock, then resolve the offset of the result."""
    wall = as_local(now).replace(tzinfo=None)
    return subtract_lookback(wall, unit, amount).astimezone()
