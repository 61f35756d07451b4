from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from .db import db, iso, now_iso
from .models import MetricSample, ScheduleSegment, SegmentKind
from .timeutil import as_local, local_now, parse_iso

logger = logging.getLogger(__name__)


def add_sample(*, metric_type: str, value: float, timestamp: datetime | None = None) -> MetricSample:
    recorded = as_local(timestamp) if timestamp is not None else local_now()
    with db() as conn:
        conn.execute(
            "INSERT INTO metric_samples(metric_type, value, recorded_at, ingested_at) VALUES(?, ?, ?, ?)",
            (metric_type, float(value), iso(recorded), now_iso()),
        )
    return MetricSample(metric_type=metric_type, value=float(value), timestamp=recorded)


def list_samples(metric_type: str | None = None) -> list[MetricSample]:
    """Samples in no particular order; rows with an unreadable timestamp are skipped."""
    with db() as conn:
        if metric_type:
            rows = conn.execute(
                "SELECT metric_type, value, recorded_at FROM metric_samples WHERE metric_type = ?",
                (metric_type,),
            ).fetchall()
        else:
            rows = conn.execute("SELECT metric_type, value, recorded_at FROM metric_samples").fetchall()

    out: list[MetricSample] = []
    for r in rows:
        ts = parse_iso(r["recorded_at"])
        if ts is None:
            logger.warning("skipping %s sample with bad timestamp %r", r["metric_type"], r["recorded_at"])
            continue
        out.append(MetricSample(metric_type=r["metric_type"], value=float(r["value"]), timestamp=ts))
    return out


def set_snapshot(metric_type: str, value: float) -> None:
    with db() as conn:
        conn.execute(
            """
            INSERT INTO metric_snapshots(metric_type, value, updated_at)
            VALUES(?, ?, ?)
            ON CONFLICT(metric_type) DO UPDATE SET
              value=excluded.value,
              updated_at=excluded.updated_at
            """,
            (metric_type, float(value), now_iso()),
        )


def get_snapshot(metric_type: str) -> float | None:
    with db() as conn:
        row = conn.execute(
            "SELECT value FROM metric_snapshots WHERE metric_type = ?", (metric_type,)
        ).fetchone()
    return float(row["value"]) if row else None


def replace_schedule(date_key: str, segments: Iterable[ScheduleSegment]) -> int:
    segments = [s for s in segments if s.date_key == date_key]
    with db() as conn:
        conn.execute("DELETE FROM schedule_segments WHERE date_key = ?", (date_key,))
        conn.executemany(
            """
            INSERT INTO schedule_segments(date_key, start_time, end_time, title, kind, color, duration)
            VALUES(?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (s.date_key, iso(as_local(s.start)), iso(as_local(s.end)), s.title, s.kind.value, s.color, s.duration)
                for s in segments
            ],
        )
    logger.info("replaced schedule for %s (%d segments)", date_key, len(segments))
    return len(segments)


def list_segments(date_key: str | None = None) -> list[ScheduleSegment]:
    with db() as conn:
        if date_key:
            rows = conn.execute("SELECT * FROM schedule_segments WHERE date_key = ?", (date_key,)).fetchall()
        else:
            rows = conn.execute("SELECT * FROM schedule_segments").fetchall()
    return [
        ScheduleSegment(
            start=r["start_time"],
            end=r["end_time"],
            title=r["title"],
            kind=SegmentKind(r["kind"]),
            date_key=r["date_key"],
            color=r["color"],
            duration=r["duration"],
        )
        for r in rows
    ]


def sample_counts() -> dict[str, int]:
    with db() as conn:
        rows = conn.execute(
            "SELECT metric_type, COUNT(*) AS c FROM metric_samples GROUP BY metric_type ORDER BY c DESC"
        ).fetchall()
    return {r["metric_type"]: int(r["c"]) for r in rows}
