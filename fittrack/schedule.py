from __future__ import annotations

from datetime import datetime
from typing import Iterable, Literal

from .models import ScheduleSegment, SegmentKind
from .timeutil import as_local, local_date_key, local_now

WindowStatus = Literal["gap", "busy", "done"]


def todays_agenda(segments: Iterable[ScheduleSegment], today_key: str) -> list[ScheduleSegment]:
    return sorted((s for s in segments if s.date_key == today_key), key=lambda s: as_local(s.start))


def active_gap(
    segments: Iterable[ScheduleSegment],
    today_key: str,
    now: datetime,
) -> ScheduleSegment | None:
    """First free segment of `today_key` that is open at `now` (start inclusive, end exclusive)."""
    now = as_local(now)
    for s in segments:
        if s.kind != SegmentKind.GAP or s.date_key != today_key:
            continue
        if as_local(s.start) <= now < as_local(s.end):
            return s
    return None


def window_status(
    segments: Iterable[ScheduleSegment],
    today_key: str,
    now: datetime,
) -> WindowStatus:
    segments = list(segments)
    now = as_local(now)
    if active_gap(segments, today_key, now) is not None:
        return "gap"
    if any(as_local(s.end) > now for s in segments if s.date_key == today_key):
        return "busy"
    return "done"


def resolve_today(segments: Iterable[ScheduleSegment], now: datetime | None = None) -> dict:
    """Agenda, open gap and status for the local day containing `now`."""
    now = as_local(now) if now is not None else local_now()
    segments = list(segments)
    today_key = local_date_key(now)
    return {
        "dateKey": today_key,
        "agenda": todays_agenda(segments, today_key),
        "activeGap": active_gap(segments, today_key, now),
        "status": window_status(segments, today_key, now),
    }
