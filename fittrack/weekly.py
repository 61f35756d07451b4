from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping

from .models import DayBucket, MetricSample
from .timeutil import as_local, coerce_datetime, local_midnight, local_now

DAY_LABELS = ("M", "T", "W", "T", "F", "S", "S")


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _entry_value(entry: Any, field: str) -> tuple[datetime | None, float | None]:
    if isinstance(entry, MetricSample):
        if entry.metric_type != field:
            return None, None
        return entry.timestamp, entry.value
    if isinstance(entry, Mapping):
        return coerce_datetime(entry.get("date")), _to_float(entry.get(field))
    return None, None


def week_start(today: date) -> datetime:
    """Local midnight of the Monday of the week containing `today`."""
    return local_midnight(today - timedelta(days=today.weekday()))


def aggregate_week(
    history: Iterable[Any],
    today: date | datetime | None = None,
    field: str = "calories",
) -> list[DayBucket]:
    if today is None:
        today = local_now().date()
    elif isinstance(today, datetime):
        today = as_local(today).date()

    monday = week_start(today)
    totals = [0.0] * 7
    for entry in history:
        when, value = _entry_value(entry, field)
        # Missing, unparseable and zero values contribute nothing.
        if when is None or not value:
            continue
        # Local calendar days, so a week spanning a DST change still has seven.
        diff_days = (as_local(when).date() - monday.date()).days
        if 0 <= diff_days < 7:
            totals[diff_days] += value

    today_index = today.weekday()
    return [
        DayBucket(weekday_index=i, label=DAY_LABELS[i], total_value=totals[i], is_today=(i == today_index))
        for i in range(7)
    ]


def bar_heights(buckets: Iterable[DayBucket]) -> list[float]:
    """Percent heights for the weekly bar chart; an all-zero week scales against 1."""
    values = [b.total_value for b in buckets]
    peak = max([*values, 1.0])
    return [v / peak * 100.0 for v in values]
