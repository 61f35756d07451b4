from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Sequence

from .errors import ConfigurationError
from .models import (
    ChartConfig,
    ChartPoint,
    ChartViewState,
    FilterSpec,
    MetricSample,
    PathCommand,
    Projection,
    RangeFilter,
    TrendSummary,
)
from .timeutil import DAY_MS, as_local, elapsed_ms, local_lookback, local_now

logger = logging.getLogger(__name__)

# Y-axis breathing room so the line never touches the chart edges
FLAT_RANGE_PADDING = 5.0
SPREAD_PADDING_BELOW = 0.2
SPREAD_PADDING_ABOVE = 0.1

STALE_AFTER_MS = DAY_MS

WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def resolve_filter(raw: RangeFilter | str) -> RangeFilter:
    if isinstance(raw, RangeFilter):
        return raw
    try:
        return RangeFilter(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid range filter: {raw!r}") from exc


def filter_spec(config: ChartConfig, range_filter: RangeFilter) -> FilterSpec:
    spec = config.filters.get(range_filter)
    if spec is None:
        raise ConfigurationError(f"No filter configured for {range_filter.value}")
    return spec


def point_spacing(config: ChartConfig, range_filter: RangeFilter) -> float:
    spec = filter_spec(config, range_filter)
    if spec.point_spacing is not None:
        return float(spec.point_spacing)
    if spec.fit_points:
        return config.available_width / spec.fit_points
    raise ConfigurationError(f"Filter {range_filter.value} defines neither point_spacing nor fit_points")


def select_window(samples: Iterable[MetricSample], metric_type: str, cutoff: datetime) -> list[MetricSample]:
    picked = [s for s in samples if s.metric_type == metric_type and as_local(s.timestamp) >= cutoff]
    return sorted(picked, key=lambda s: as_local(s.timestamp))


def inject_projected_sample(
    window: list[MetricSample],
    metric_type: str,
    current_value: float | None,
    now: datetime,
) -> list[MetricSample]:
    """Append the current snapshot as a "now" sample when the window is empty or stale.

    This changes the apparent trend: the chart always ends at the value the user
    currently sees on their profile, even if it was never logged as history.
    """
    if current_value is None:
        return window
    if window and elapsed_ms(as_local(window[-1].timestamp), now) <= STALE_AFTER_MS:
        return window
    logger.debug("injecting projected %s sample value=%s at %s", metric_type, current_value, now.isoformat())
    projected = MetricSample(metric_type=metric_type, value=float(current_value), timestamp=now, projected=True)
    return [*window, projected]


def scale_range(values: Sequence[float]) -> tuple[float, float]:
    lo = min(values)
    hi = max(values)
    if lo == hi:
        return lo - FLAT_RANGE_PADDING, hi + FLAT_RANGE_PADDING
    spread = hi - lo
    return lo - spread * SPREAD_PADDING_BELOW, hi + spread * SPREAD_PADDING_ABOVE


def scale_y(value: float, lo: float, hi: float, config: ChartConfig) -> float:
    # Inverted: larger values sit higher (smaller y).
    plot_height = config.plot_bottom - config.plot_top
    return config.plot_bottom - ((value - lo) / (hi - lo)) * plot_height


def format_label(ts: datetime, range_filter: RangeFilter) -> str:
    if range_filter == RangeFilter.WEEK:
        return WEEKDAY_ABBR[ts.weekday()]
    if range_filter == RangeFilter.MONTH:
        return str(ts.day)
    return MONTH_ABBR[ts.month - 1]


def format_full_date(ts: datetime) -> str:
    return f"{MONTH_ABBR[ts.month - 1]} {ts.day}, {ts.year}"


def project(
    samples: Iterable[MetricSample],
    metric_type: str,
    current_value: float | None,
    range_filter: RangeFilter | str,
    *,
    config: ChartConfig | None = None,
    now: datetime | None = None,
) -> Projection:
    """Turn raw samples into chart-ready points for one metric and range filter.

    Points are spaced by rank, not by elapsed time: two readings a day apart and
    two readings a month apart occupy the same horizontal gap.
    """
    config = config or ChartConfig()
    range_filter = resolve_filter(range_filter)
    spec = filter_spec(config, range_filter)
    spacing = point_spacing(config, range_filter)
    # One clock read for the whole call.
    now = as_local(now) if now is not None else local_now()

    cutoff = local_lookback(now, spec.lookback_unit, spec.lookback_amount)
    window = select_window(samples, metric_type, cutoff)
    window = inject_projected_sample(window, metric_type, current_value, now)

    if not window:
        return Projection(
            range_filter=range_filter,
            points=[],
            total_width=config.available_width,
            point_spacing=spacing,
        )

    lo, hi = scale_range([s.value for s in window])
    points: list[ChartPoint] = []
    for i, s in enumerate(window):
        ts = as_local(s.timestamp)
        points.append(
            ChartPoint(
                x=i * spacing + spacing / 2,
                y=scale_y(s.value, lo, hi, config),
                value=s.value,
                timestamp=ts,
                label=format_label(ts, range_filter),
                projected=s.projected,
            )
        )

    return Projection(
        range_filter=range_filter,
        points=points,
        total_width=max(config.available_width, len(points) * spacing),
        point_spacing=spacing,
        min_value=lo,
        max_value=hi,
    )


def line_path(points: Sequence[ChartPoint]) -> list[PathCommand]:
    return [PathCommand(command="M" if i == 0 else "L", x=p.x, y=p.y) for i, p in enumerate(points)]


def area_path(points: Sequence[ChartPoint], baseline: float) -> list[PathCommand]:
    """Close the line down to `baseline` for a filled area; needs two points."""
    if len(points) < 2:
        return []
    return [
        *line_path(points),
        PathCommand(command="L", x=points[-1].x, y=baseline),
        PathCommand(command="L", x=points[0].x, y=baseline),
        PathCommand(command="Z"),
    ]


def _fmt_num(v: float) -> str:
    s = f"{v:.2f}".rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def svg_path_d(commands: Sequence[PathCommand]) -> str:
    parts: list[str] = []
    for c in commands:
        if c.x is None or c.y is None:
            parts.append(c.command)
        else:
            parts.append(f"{c.command} {_fmt_num(c.x)} {_fmt_num(c.y)}")
    return " ".join(parts)


def display_reading(state: ChartViewState, summary: TrendSummary) -> dict[str, Any]:
    """Header value for the chart screen: the selected point, else the latest reading."""
    if state.selected is not None:
        return {
            "caption": "Recorded on",
            "date": format_full_date(state.selected.timestamp),
            "value": state.selected.value,
        }
    return {"caption": "Latest Reading", "date": "Current", "value": summary.latest}
