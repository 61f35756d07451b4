from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Mapping, Sequence

from . import settings
from .models import ChartPoint, TrendSummary


class Direction(str, Enum):
    LOWER_IS_BETTER = "lower"
    HIGHER_IS_BETTER = "higher"


BEST_OF: dict[Direction, Callable[[Iterable[float]], float]] = {
    Direction.LOWER_IS_BETTER: min,
    Direction.HIGHER_IS_BETTER: max,
}

# Metrics not listed here default to higher-is-better (height, steps, lifts...).
METRIC_DIRECTIONS: dict[str, Direction] = {
    m: Direction.LOWER_IS_BETTER for m in settings.LOWER_IS_BETTER_METRICS
}


def direction_for(metric_type: str, directions: Mapping[str, Direction] | None = None) -> Direction:
    table = METRIC_DIRECTIONS if directions is None else directions
    return table.get(metric_type, Direction.HIGHER_IS_BETTER)


def is_favorable(
    change: float,
    metric_type: str,
    directions: Mapping[str, Direction] | None = None,
) -> bool:
    if direction_for(metric_type, directions) == Direction.LOWER_IS_BETTER:
        return change <= 0
    return change >= 0


def summarize(
    points: Sequence[ChartPoint],
    metric_type: str,
    directions: Mapping[str, Direction] | None = None,
) -> TrendSummary:
    """Latest value, change over the window and the personal best among `points`."""
    if not points:
        return TrendSummary()

    values = [p.value for p in points]
    latest = values[-1]
    change = latest - values[0]
    best = BEST_OF[direction_for(metric_type, directions)](values)
    return TrendSummary(
        latest=latest,
        change_since_start=change,
        best=best,
        favorable=is_favorable(change, metric_type, directions),
    )
