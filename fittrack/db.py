from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

DB_PATH = os.getenv("DB_PATH", os.path.join(os.path.dirname(__file__), "..", "fittrack.db"))


def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    return conn


@contextmanager
def db() -> Iterator[sqlite3.Connection]:
    conn = _connect()
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    with db() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS metric_samples (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              metric_type TEXT NOT NULL,
              value REAL NOT NULL,
              recorded_at TEXT NOT NULL,
              ingested_at TEXT NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_metric_samples_type ON metric_samples(metric_type);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_metric_samples_recorded_at ON metric_samples(recorded_at);")

        # Latest known value per metric (profile weight/height etc.)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS metric_snapshots (
              metric_type TEXT PRIMARY KEY,
              value REAL NOT NULL,
              updated_at TEXT NOT NULL
            );
            """
        )

        # Precomputed busy/gap segments from the calendar collaborator
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schedule_segments (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              date_key TEXT NOT NULL,
              start_time TEXT NOT NULL,
              end_time TEXT NOT NULL,
              title TEXT NOT NULL,
              kind TEXT NOT NULL,
              color TEXT,
              duration TEXT
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_schedule_segments_date_key ON schedule_segments(date_key);")


def iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
