"""
Report statistics assembled from a filtered set of nights.

Each function returns a frozen model that a renderer can turn into a
summary list, a metrics table or a weekday/weekend comparison.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from sleep_report.core.analysis.sleep_metrics import (
    AHI_FIELD, aggregate_by_day_type, aggregate_metric, classify_ahi, split_by_day_type,
)
from sleep_report.core.analysis.timing_layout import wrapped_duration
from sleep_report.core.models.data_models import NightSummary
from sleep_report.core.models.output_models import (
    DurationEfficiencyRegularity, MetricRow, ReportStatistics, ReportSummary, RitualTimes,
    SeriesPoint, SleepRitual, SleepVitals,
)
from sleep_report.utils.field_catalog import DEFAULT_CATALOG, FieldCatalog
from sleep_report.utils.time_utils import (
    DISPLAY_DATE_FORMAT, format_local, minutes_from_noon, noon_minutes_to_clock,
)

logger = logging.getLogger(__name__)


def _mean(values: Iterable[Optional[float]]) -> float:
    """Mean of the non-null values; 0 for an empty set"""
    present = [value for value in values if value is not None]
    return float(np.mean(present)) if present else 0.0


def format_hours_minutes(hours: Optional[float]) -> str:
    """Format decimal hours as e.g. '7h30'"""
    if hours is None or np.isnan(hours):
        return '-'
    whole = int(hours)
    minutes = int(round((hours - whole) * 60))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h{minutes:02d}"


def _valid(nights: Iterable[NightSummary]) -> List[NightSummary]:
    return [night for night in nights if night.end_utc is not None]


def summarize_nights(nights: List[NightSummary], catalog: Optional[FieldCatalog] = None) -> ReportSummary:
    """
    Headline figures for a set of nights

    Args:
        nights: Filtered nights
        catalog: Field catalogue for unit conversion

    Returns:
        ReportSummary; dates are None when no night has a valid interval
    """
    catalog = catalog or DEFAULT_CATALOG
    starts = [night.start_utc for night in nights if night.start_utc is not None]
    ends = [night.end_utc for night in nights if night.end_utc is not None]

    return ReportSummary(
        first_date=min(starts).strftime(DISPLAY_DATE_FORMAT) if starts else None,
        last_date=max(ends).strftime(DISPLAY_DATE_FORMAT) if ends else None,
        total_nights=len(nights),
        mean_duration_hours=_mean(night.total_sleep_time_hours for night in nights),
        efficiency=aggregate_metric(nights, "sleep_efficiency", catalog),
        ahi=aggregate_metric(nights, AHI_FIELD, catalog),
        snoring=aggregate_metric(nights, "snoring", catalog),
    )


def metrics_table(nights: List[NightSummary], catalog: Optional[FieldCatalog] = None,
                  apply_timezone: bool = True) -> List[MetricRow]:
    """
    One aggregate row per catalogued field with at least one value

    Args:
        nights: Filtered nights
        catalog: Field catalogue deciding order and units
        apply_timezone: Date series points in each night's zone; UTC when False

    Returns:
        Rows in catalogue order, each with a per-night series
    """
    catalog = catalog or DEFAULT_CATALOG
    valid = _valid(nights)
    rows = []

    for field in catalog.fields:
        aggregate = aggregate_metric(valid, field.name, catalog)
        if aggregate.count == 0:
            continue

        series = []
        for night in valid:
            value = getattr(night, field.name)
            if value is None:
                continue
            series.append(SeriesPoint(
                date=format_local(night.end_utc, night.timezone, DISPLAY_DATE_FORMAT, apply_timezone),
                value=field.convert(value),
                night_id=night.id,
            ))
        rows.append(MetricRow(aggregate=aggregate, series=series))

    return rows


def duration_efficiency_regularity(nights: List[NightSummary], catalog: Optional[FieldCatalog] = None,
                                   apply_timezone: bool = True) -> DurationEfficiencyRegularity:
    valid = _valid(nights)
    return DurationEfficiencyRegularity(
        sleep_duration=aggregate_by_day_type(valid, "total_sleep_time", catalog, apply_timezone),
        mean_latency_minutes=_mean(night.sleep_latency_minutes for night in valid),
        mean_time_in_bed_hours=_mean(night.total_timeinbed_hours for night in valid),
        mean_total_sleep_hours=_mean(night.total_sleep_time_hours for night in valid),
        mean_efficiency_percent=_mean(night.sleep_efficiency_percent for night in valid),
    )


def ritual_times(nights: List[NightSummary], apply_timezone: bool = True) -> RitualTimes:
    """
    Average bedtime, sleep onset, wake-up and get-up clock times

    Times are averaged as minutes from local noon, so 23:00 and 01:00
    average to 00:00 rather than 12:00.
    """
    bedtimes, asleep, wake, get_up = [], [], [], []

    for night in nights:
        if not night.has_valid_dates:
            continue
        bed = minutes_from_noon(night.start_utc, night.timezone, apply_timezone)
        end = minutes_from_noon(night.end_utc, night.timezone, apply_timezone)
        wake_on_axis = bed + wrapped_duration(bed, end)

        bedtimes.append(bed)
        wake.append(wake_on_axis)
        if night.durationtosleep_minutes is not None:
            asleep.append(bed + night.durationtosleep_minutes)
        if night.durationtowakeup_minutes is not None:
            get_up.append(wake_on_axis + night.durationtowakeup_minutes)

    def clock(values):
        return noon_minutes_to_clock(_mean(values)) if values else None

    return RitualTimes(nights=len(bedtimes), bedtime=clock(bedtimes), asleep_time=clock(asleep),
                       wake_time=clock(wake), get_up_time=clock(get_up))


def sleep_ritual(nights: List[NightSummary], apply_timezone: bool = True) -> SleepRitual:
    weekday, weekend = split_by_day_type(nights, apply_timezone)
    return SleepRitual(weekday=ritual_times(weekday, apply_timezone),
                       weekend=ritual_times(weekend, apply_timezone))


def sleep_vitals(nights: List[NightSummary], catalog: Optional[FieldCatalog] = None) -> SleepVitals:
    """
    AHI, snoring and heart-rate figures for the vitals table

    Args:
        nights: Filtered nights
        catalog: Field catalogue for unit conversion

    Returns:
        SleepVitals
    """
    valid = _valid(nights)
    ahi = aggregate_metric(valid, AHI_FIELD, catalog)
    snoring = aggregate_metric(valid, "snoring", catalog)

    snoring_percent = [night.snoring_minutes / (night.total_sleep_time / 60) * 100
                       for night in valid
                       if night.snoring_minutes is not None and night.total_sleep_time]

    hr_min = [night.hr_min for night in valid if night.hr_min is not None]
    hr_max = [night.hr_max for night in valid if night.hr_max is not None]

    return SleepVitals(
        ahi=ahi,
        ahi_min_severity=classify_ahi(ahi.min)[0],
        ahi_max_severity=classify_ahi(ahi.max)[0],
        snoring=snoring,
        snoring_percent_of_night=_mean(snoring_percent),
        mean_heart_rate=_mean(night.hr_average for night in valid),
        heart_rate_min=min(hr_min) if hr_min else None,
        heart_rate_max=max(hr_max) if hr_max else None,
    )


def build_statistics(nights: List[NightSummary], catalog: Optional[FieldCatalog] = None,
                     apply_timezone: bool = True) -> ReportStatistics:
    """All report statistics for a filtered set of nights"""
    logger.info(f"Computing report statistics for {len(nights)} nights")
    return ReportStatistics(
        summary=summarize_nights(nights, catalog),
        metrics=metrics_table(nights, catalog, apply_timezone),
        duration_efficiency_regularity=duration_efficiency_regularity(nights, catalog, apply_timezone),
        ritual=sleep_ritual(nights, apply_timezone),
        vitals=sleep_vitals(nights, catalog),
    )

