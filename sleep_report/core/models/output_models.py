# sleep_report/core/models/output_models.py

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sleep_report.core.models.data_models import (
    EpochSample, InputShape, MetricAggregate, NightId, NightSummary,
    ProcessingWarning, TimingRecord, WakeEpisode,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# Stage results
class NormalizationResult(_Frozen):
    """Normalized nights plus the warnings raised while building them"""
    shape: Optional[InputShape] = None
    nights: List[NightSummary] = []
    warnings: List[ProcessingWarning] = []


class FlattenResult(_Frozen):
    samples: List[EpochSample] = []
    warnings: List[ProcessingWarning] = []


# Timing layout
class WakeSegment(_Frozen):
    """A wake episode projected onto the noon-based axis"""
    night_id: NightId
    label: str
    start: datetime
    end: datetime
    start_minutes: int
    duration_minutes: int = Field(..., ge=0)


class AxisTick(_Frozen):
    value: int
    text: str


class TimingLayout(_Frozen):
    records: List[TimingRecord] = []
    wake_segments: List[WakeSegment] = []
    ticks: List[AxisTick] = []


# Chart descriptions
class ChartTrace(_Frozen):
    name: str
    color: str
    x: List[str]
    y: List[float]
    text: List[str] = []
    shape: str = "linear"  # 'hv' for stepped stage traces


class ChartMarker(_Frozen):
    """Vertical marker line at a local display time"""
    x: str
    name: Optional[str] = None
    color: str
    dash: str = "dash"


class ChartSpec(_Frozen):
    kind: str  # 'sleep_stage' or 'metric'
    title: str
    y_label: str
    metric: Optional[str] = None
    traces: List[ChartTrace] = []
    markers: List[ChartMarker] = []
    y_axis: Dict[str, Any] = {}


class NightMeta(_Frozen):
    label: str
    start: Optional[str] = None
    end: Optional[str] = None


# Report statistics
class SeriesPoint(_Frozen):
    date: str
    value: float
    night_id: NightId


class MetricRow(_Frozen):
    aggregate: MetricAggregate
    series: List[SeriesPoint] = []


class ReportSummary(_Frozen):
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    total_nights: int = 0
    mean_duration_hours: float = 0.0
    efficiency: MetricAggregate
    ahi: MetricAggregate
    snoring: MetricAggregate


class DayTypeSplit(_Frozen):
    weekday: MetricAggregate
    weekend: MetricAggregate


class DurationEfficiencyRegularity(_Frozen):
    sleep_duration: DayTypeSplit
    mean_latency_minutes: float = 0.0
    mean_time_in_bed_hours: float = 0.0
    mean_total_sleep_hours: float = 0.0
    mean_efficiency_percent: float = 0.0


class RitualTimes(_Frozen):
    """Average local clock times (HH:MM) for one day type"""
    nights: int = 0
    bedtime: Optional[str] = None
    asleep_time: Optional[str] = None
    wake_time: Optional[str] = None
    get_up_time: Optional[str] = None


class SleepRitual(_Frozen):
    weekday: RitualTimes
    weekend: RitualTimes


class SleepVitals(_Frozen):
    ahi: MetricAggregate
    ahi_min_severity: Optional[str] = None
    ahi_max_severity: Optional[str] = None
    snoring: MetricAggregate
    snoring_percent_of_night: float = 0.0
    mean_heart_rate: float = 0.0
    heart_rate_min: Optional[float] = None
    heart_rate_max: Optional[float] = None


class ReportStatistics(_Frozen):
    summary: ReportSummary
    metrics: List[MetricRow] = []
    duration_efficiency_regularity: DurationEfficiencyRegularity
    ritual: SleepRitual
    vitals: SleepVitals


class ReportData(BaseModel):
    """Everything a renderer needs for one report run"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str
    generated_at: datetime
    apply_timezone: bool = True
    nights: List[NightSummary] = []
    samples: List[EpochSample] = []
    wake_episodes: List[WakeEpisode] = []
    timing: TimingLayout
    night_charts: Dict[str, List[ChartSpec]] = {}
    night_meta: Dict[str, NightMeta] = {}
    statistics: ReportStatistics
    summary_table: Any = None  # pandas DataFrame
    epoch_table: Any = None
    warnings: List[ProcessingWarning] = []

    @property
    def has_epoch_data(self) -> bool:
        return len(self.samples) > 0
