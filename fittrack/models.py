from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import settings
from .errors import ConfigurationError


class RangeFilter(str, Enum):
    WEEK = "W"
    MONTH = "M"
    SIX_MONTH = "6M"
    YEAR = "Y"


class SegmentKind(str, Enum):
    BUSY = "busy"
    GAP = "gap"


class MetricSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_type: str
    value: float
    timestamp: datetime
    projected: bool = False


class FilterSpec(BaseModel):
    """Lookback and horizontal spacing for one range filter.

    Spacing is either a fixed `point_spacing` or, when that is unset, the
    available width divided by `fit_points` (the week view fills the screen).
    """

    model_config = ConfigDict(frozen=True)

    lookback_unit: Literal["days", "months", "years"]
    lookback_amount: int = Field(ge=0)
    point_spacing: Optional[float] = Field(default=None, gt=0)
    fit_points: Optional[int] = Field(default=None, gt=0)


DEFAULT_FILTERS: dict[RangeFilter, FilterSpec] = {
    RangeFilter.WEEK: FilterSpec(lookback_unit="days", lookback_amount=7, fit_points=7),
    RangeFilter.MONTH: FilterSpec(lookback_unit="months", lookback_amount=1, point_spacing=40),
    RangeFilter.SIX_MONTH: FilterSpec(lookback_unit="months", lookback_amount=6, point_spacing=60),
    RangeFilter.YEAR: FilterSpec(lookback_unit="years", lookback_amount=1, point_spacing=40),
}


class ChartConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_height: float = Field(default=220.0, gt=0)
    top_padding: float = Field(default=20.0, ge=0)
    bottom_padding: float = Field(default=30.0, ge=0)
    available_width: float = Field(default=335.0, gt=0)
    filters: dict[RangeFilter, FilterSpec] = Field(default_factory=lambda: dict(DEFAULT_FILTERS))

    @model_validator(mode="after")
    def check_plot_band(self) -> ChartConfig:
        if self.chart_height <= self.top_padding + self.bottom_padding:
            raise ConfigurationError(
                f"chart_height {self.chart_height} leaves no room between paddings "
                f"{self.top_padding} and {self.bottom_padding}"
            )
        return self

    @classmethod
    def from_env(cls) -> ChartConfig:
        return cls(
            chart_height=settings.CHART_HEIGHT,
            top_padding=settings.CHART_PADDING_TOP,
            bottom_padding=settings.CHART_PADDING_BOTTOM,
            available_width=settings.AVAILABLE_WIDTH,
        )

    @property
    def plot_top(self) -> float:
        return self.top_padding

    @property
    def plot_bottom(self) -> float:
        return self.chart_height - self.bottom_padding


class ChartPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    value: float
    timestamp: datetime
    label: str
    projected: bool = False


class PathCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: Literal["M", "L", "Z"]
    x: Optional[float] = None
    y: Optional[float] = None


class Projection(BaseModel):
    range_filter: RangeFilter
    points: list[ChartPoint]
    total_width: float
    point_spacing: float
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class TrendSummary(BaseModel):
    latest: float = 0.0
    change_since_start: float = 0.0
    best: float = 0.0
    favorable: bool = True


class DayBucket(BaseModel):
    weekday_index: int = Field(ge=0, le=6)
    label: str
    total_value: float = 0.0
    is_today: bool = False


class ScheduleSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    title: str
    kind: SegmentKind
    date_key: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    color: Optional[str] = None
    duration: Optional[str] = None


class ChartViewState(BaseModel):
    """Screen-side selection state, passed into queries explicitly."""

    model_config = ConfigDict(frozen=True)

    range_filter: RangeFilter = RangeFilter.SIX_MONTH
    selected: Optional[ChartPoint] = None

    def with_filter(self, range_filter: RangeFilter) -> ChartViewState:
        # Selection never survives a filter change.
        if range_filter == self.range_filter:
            return self
        return ChartViewState(range_filter=range_filter, selected=None)

    def toggle_point_selection(self, point: ChartPoint) -> ChartViewState:
        if self.selected == point:
            return ChartViewState(range_filter=self.range_filter, selected=None)
        return ChartViewState(range_filter=self.range_filter, selected=point)


class GoalProgress(BaseModel):
    value: float
    goal: float
    ratio: float


# --- API request bodies ---


class SampleCreateRequest(BaseModel):
    metric_type: str = Field(min_length=1)
    value: float
    timestamp: Optional[datetime] = None


class SnapshotUpdateRequest(BaseModel):
    metric_type: str = Field(min_length=1)
    value: float


class ScheduleReplaceRequest(BaseModel):
    date_key: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    segments: list[ScheduleSegment]
