# sleep_report/core/models/data_models.py

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


NightId = Union[int, str]


class SleepStage(IntEnum):
    AWAKE = 0
    LIGHT = 1
    DEEP = 2
    REM = 3


class InputShape(str, Enum):
    VENDOR_API = "vendor_api"
    PREFIXED_TABULAR = "prefixed_tabular"
    CANONICAL_TABULAR = "canonical_tabular"


class ProcessingWarning(BaseModel):
    """A recoverable, row- or field-level problem found while processing a batch"""
    model_config = ConfigDict(frozen=True)

    stage: str
    message: str
    night_id: Optional[NightId] = None
    row_index: Optional[int] = None
    field: Optional[str] = None


# Night summary
class NightSummary(BaseModel):
    """One sleep session, normalized from a single raw input row"""
    model_config = ConfigDict(frozen=True)

    id: NightId
    timezone: str = "UTC"
    label: str = ""
    start_utc: Optional[datetime] = None  # None marks an unparseable date
    end_utc: Optional[datetime] = None

    # Raw vendor values (seconds, fractions, counts, rates)
    total_timeinbed: Optional[float] = None
    total_sleep_time: Optional[float] = None
    asleepduration: Optional[float] = None
    lightsleepduration: Optional[float] = None
    remsleepduration: Optional[float] = None
    deepsleepduration: Optional[float] = None
    sleep_efficiency: Optional[float] = None
    sleep_latency: Optional[float] = None
    wakeup_latency: Optional[float] = None
    wakeupduration: Optional[float] = None
    wakeupcount: Optional[float] = None
    waso: Optional[float] = None
    nb_rem_episodes: Optional[float] = None
    apnea_hypopnea_index: Optional[float] = Field(None, ge=0.0)
    withings_index: Optional[float] = None
    durationtosleep: Optional[float] = None
    durationtowakeup: Optional[float] = None
    out_of_bed_count: Optional[float] = None
    hr_average: Optional[float] = None
    hr_min: Optional[float] = None
    hr_max: Optional[float] = None
    rr_average: Optional[float] = None
    rr_min: Optional[float] = None
    rr_max: Optional[float] = None
    snoring: Optional[float] = None
    snoringepisodecount: Optional[float] = None
    sleep_score: Optional[float] = None
    mvt_score_avg: Optional[float] = None
    mvt_active_duration: Optional[float] = None
    chest_movement_rate_average: Optional[float] = None
    chest_movement_rate_min: Optional[float] = None
    chest_movement_rate_max: Optional[float] = None
    breathing_sounds: Optional[float] = None
    breathing_sounds_episode_count: Optional[float] = None

    night_events: Optional[Any] = None

    # Display-unit equivalents, computed once by the normalizer
    total_timeinbed_hours: Optional[float] = None
    total_sleep_time_hours: Optional[float] = None
    asleepduration_hours: Optional[float] = None
    lightsleepduration_hours: Optional[float] = None
    remsleepduration_hours: Optional[float] = None
    deepsleepduration_hours: Optional[float] = None
    sleep_efficiency_percent: Optional[float] = None
    sleep_latency_minutes: Optional[float] = None
    wakeup_latency_minutes: Optional[float] = None
    wakeupduration_minutes: Optional[float] = None
    waso_minutes: Optional[float] = None
    durationtosleep_minutes: Optional[float] = None
    durationtowakeup_minutes: Optional[float] = None
    snoring_minutes: Optional[float] = None
    mvt_active_duration_minutes: Optional[float] = None

    @field_validator('start_utc', 'end_utc')
    @classmethod
    def ensure_utc(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def has_valid_dates(self) -> bool:
        """Both instants parsed and start <= end"""
        return (self.start_utc is not None and self.end_utc is not None
                and self.start_utc <= self.end_utc)

    @property
    def duration_seconds(self) -> Optional[float]:
        if not self.has_valid_dates:
            return None
        return (self.end_utc - self.start_utc).total_seconds()


# Epoch samples
class EpochSample(BaseModel):
    """One timestamped observation within a night"""
    model_config = ConfigDict(frozen=True)

    night_id: NightId
    timestamp: int  # epoch seconds, UTC
    state: SleepStage
    hr: Optional[float] = None
    rr: Optional[float] = None
    snoring: Optional[float] = None
    sdnn: Optional[float] = None
    rmssd: Optional[float] = None
    movement_score: Optional[float] = None
    chest_movement_rate: Optional[float] = None
    vendor_index: Optional[float] = None
    breathing_sounds: Optional[float] = None

    @property
    def datetime_utc(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


# Wake episodes
class WakeEpisode(BaseModel):
    """A sustained awake interval, clipped to its night"""
    model_config = ConfigDict(frozen=True)

    night_id: NightId
    start: datetime
    end: datetime
    duration_seconds: float = Field(..., ge=0.0)

    @model_validator(mode='after')
    def validate_interval(self):
        if self.end < self.start:
            raise ValueError('Wake episode end must not precede its start')
        return self


# Timing layout rows
class TimingRecord(BaseModel):
    """One row of the multi-night horizontal timeline"""
    model_config = ConfigDict(frozen=True)

    night_id: NightId
    label: str
    timezone: str
    start_utc: datetime
    end_utc: datetime
    base_minutes: int = Field(..., ge=0, lt=1440)
    duration_minutes: int = Field(..., ge=0)
    latency_minutes: Optional[float] = None

    # Side-panel annotations copied from the night summary
    out_of_bed_count: Optional[float] = None
    ahi: Optional[int] = None
    snoring_minutes: Optional[float] = None
    hr_average: Optional[float] = None
    sleep_efficiency_percent: Optional[float] = None
    time_in_bed_hours: Optional[float] = None
    time_asleep_hours: Optional[float] = None

    @property
    def end_minutes(self) -> int:
        return self.base_minutes + self.duration_minutes


# Statistics
class MetricAggregate(BaseModel):
    """Aggregate of one field over a set of nights, in display units"""
    model_config = ConfigDict(frozen=True)

    field: str
    display_name: str
    unit: Optional[str] = None
    count: int = Field(0, ge=0)
    mean: float = 0.0
    std: float = 0.0
    min: Optional[float] = None  # undefined for an empty set
    max: Optional[float] = None
    severity: Optional[str] = None
    severity_color: Optional[str] = None
    values: List[float] = []
