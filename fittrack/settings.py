from __future__ import annotations

import os


def get_env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def get_float(name: str, default: float) -> float:
    raw = get_env(name, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid number in env var {name}: {raw}") from exc


def get_csv(name: str, default: str) -> tuple[str, ...]:
    raw = get_env(name, default)
    return tuple(x.strip() for x in raw.split(",") if x.strip())


# Renderer logical pixel space
CHART_HEIGHT = get_float("CHART_HEIGHT", 220.0)
CHART_PADDING_TOP = get_float("CHART_PADDING_TOP", 20.0)
CHART_PADDING_BOTTOM = get_float("CHART_PADDING_BOTTOM", 30.0)
AVAILABLE_WIDTH = get_float("AVAILABLE_WIDTH", 335.0)

STEP_GOAL = get_float("STEP_GOAL", 10000.0)
HYDRATION_GOAL_ML = get_float("HYDRATION_GOAL_ML", 2500.0)

LOWER_IS_BETTER_METRICS = get_csv("LOWER_IS_BETTER_METRICS", "weight")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
