from __future__ import annotations

from math import isfinite
from typing import Any

from . import settings
from .models import GoalProgress

DEFAULT_GOALS: dict[str, float] = {
    "steps": settings.STEP_GOAL,
    "hydration": settings.HYDRATION_GOAL_ML,
}


def _safe_number(raw: Any, fallback: float) -> float:
    if isinstance(raw, bool):
        return fallback
    try:
        v = float(raw)
    except (TypeError, ValueError):
        return fallback
    return v if isfinite(v) else fallback


def goal_progress(value: Any, goal: Any) -> GoalProgress:
    """Ring progress towards a daily goal, capped at 1.0."""
    v = _safe_number(value, 0.0)
    g = _safe_number(goal, 1.0)
    if g <= 0:
        g = 1.0
    return GoalProgress(value=v, goal=g, ratio=min(v / g, 1.0))
