from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from . import store
from .db import DB_PATH, init_db
from .errors import ConfigurationError
from .goals import DEFAULT_GOALS, goal_progress
from .models import (
    ChartConfig,
    ChartViewState,
    SampleCreateRequest,
    ScheduleReplaceRequest,
    SnapshotUpdateRequest,
)
from .projector import area_path, display_reading, line_path, project, svg_path_d
from .schedule import resolve_today
from .security import require_api_key
from .timeutil import local_now
from .trends import summarize
from .weekly import aggregate_week, bar_heights

logger = logging.getLogger(__name__)

app = FastAPI(title="Fittrack analytics", version="0.1.0")

CHART_CONFIG = ChartConfig.from_env()


@app.on_event("startup")
def _startup() -> None:
    init_db()


@app.get("/api/status")
def status(_: None = Depends(require_api_key)) -> dict[str, Any]:
    counts = store.sample_counts()
    return {"ok": True, "dbPath": str(DB_PATH), "totalSamples": sum(counts.values()), "byMetric": counts}


@app.post("/api/samples", status_code=201)
def create_sample(req: SampleCreateRequest, _: None = Depends(require_api_key)) -> dict[str, Any]:
    sample = store.add_sample(metric_type=req.metric_type, value=req.value, timestamp=req.timestamp)
    return sample.model_dump(mode="json")


@app.put("/api/snapshot")
def update_snapshot(req: SnapshotUpdateRequest, _: None = Depends(require_api_key)) -> dict[str, Any]:
    store.set_snapshot(req.metric_type, req.value)
    return {"ok": True, "metric_type": req.metric_type, "value": req.value}


@app.put("/api/schedule")
def replace_schedule(req: ScheduleReplaceRequest, _: None = Depends(require_api_key)) -> dict[str, Any]:
    mismatched = [s for s in req.segments if s.date_key != req.date_key]
    if mismatched:
        raise HTTPException(status_code=400, detail=f"Segment date_key must be {req.date_key}")
    count = store.replace_schedule(req.date_key, req.segments)
    return {"ok": True, "date_key": req.date_key, "count": count}


@app.get("/api/chart/{metric}")
def chart(
    metric: str,
    range_filter: str = Query("6M", alias="range"),
    selected: Optional[int] = None,
    _: None = Depends(require_api_key),
) -> dict[str, Any]:
    """Chart geometry, trend summary and header reading for one metric."""
    now = local_now()
    try:
        projection = project(
            store.list_samples(metric),
            metric,
            store.get_snapshot(metric),
            range_filter,
            config=CHART_CONFIG,
            now=now,
        )
    except ConfigurationError as exc:
        logger.warning("rejected chart request for %s: %s", metric, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    points = projection.points
    summary = summarize(points, metric)

    view = ChartViewState(range_filter=projection.range_filter)
    if selected is not None:
        if not 0 <= selected < len(points):
            raise HTTPException(status_code=400, detail=f"selected out of range: {selected}")
        view = view.toggle_point_selection(points[selected])

    return {
        "metric": metric,
        "projection": projection.model_dump(mode="json"),
        "linePath": svg_path_d(line_path(points)),
        "areaPath": svg_path_d(area_path(points, CHART_CONFIG.chart_height)),
        "summary": summary.model_dump(mode="json"),
        "reading": display_reading(view, summary),
    }


@app.get("/api/week")
def week(field: str = "calories", _: None = Depends(require_api_key)) -> dict[str, Any]:
    today = local_now().date()
    buckets = aggregate_week(store.list_samples(field), today, field=field)
    return {
        "field": field,
        "weekOf": today.isoformat(),
        "buckets": [b.model_dump(mode="json") for b in buckets],
        "heights": bar_heights(buckets),
    }


@app.get("/api/schedule/today")
def schedule_today(_: None = Depends(require_api_key)) -> dict[str, Any]:
    now = local_now()
    resolved = resolve_today(store.list_segments(now.date().isoformat()), now)
    gap = resolved["activeGap"]
    return {
        "dateKey": resolved["dateKey"],
        "status": resolved["status"],
        "agenda": [s.model_dump(mode="json") for s in resolved["agenda"]],
        "activeGap": gap.model_dump(mode="json") if gap is not None else None,
    }


@app.get("/api/goals")
def goals(_: None = Depends(require_api_key)) -> dict[str, Any]:
    today = local_now().date()
    out: dict[str, Any] = {}
    for metric, goal in DEFAULT_GOALS.items():
        buckets = aggregate_week(store.list_samples(metric), today, field=metric)
        today_total = buckets[today.weekday()].total_value
        out[metric] = goal_progress(today_total, goal).model_dump(mode="json")
    return {"date": today.isoformat(), "goals": out}
