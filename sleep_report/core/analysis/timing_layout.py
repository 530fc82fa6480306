"""
Multi-night horizontal timeline layout.

Every night is placed on a local "minutes from noon" axis (noon = 0,
midnight = 720) so that a night crossing midnight occupies one
contiguous bar.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sleep_report.core.models.data_models import NightSummary, TimingRecord, WakeEpisode
from sleep_report.core.models.output_models import AxisTick, TimingLayout, WakeSegment
from sleep_report.utils.constants import MINUTES_PER_DAY, NOON_MINUTES
from sleep_report.utils.time_utils import ROW_LABEL_FORMAT, format_local, minutes_from_noon

logger = logging.getLogger(__name__)

TICK_STEP_MINUTES = 60
AXIS_END_MINUTES = 2 * MINUTES_PER_DAY


def wrapped_duration(base: int, end: int) -> int:
    """Duration from base to end, assuming end crossed the wrap when it is below base"""
    if end < base:
        end += MINUTES_PER_DAY
    return end - base


def tick_label(value: int) -> str:
    """Label of an axis value, e.g. 0 -> '12PM', 720 -> '12AM'"""
    hour = ((value + NOON_MINUTES) // 60) % 24
    suffix = 'AM' if hour < 12 else 'PM'
    return f"{hour % 12 or 12}{suffix}"


def build_timing_record(night: NightSummary, apply_timezone: bool = True) -> Optional[TimingRecord]:
    """
    Project one night onto the noon-based axis

    Args:
        night: Normalized night
        apply_timezone: Use the night's zone; UTC when False

    Returns:
        TimingRecord, or None for a night without a valid interval
    """
    if not night.has_valid_dates:
        return None

    base = minutes_from_noon(night.start_utc, night.timezone, apply_timezone)
    end = minutes_from_noon(night.end_utc, night.timezone, apply_timezone)
    duration = wrapped_duration(base, end)
    # Start and end inside the same clock minute; keep the bar visible
    if duration == 0 and night.end_utc > night.start_utc:
        duration = 1

    ahi = night.apnea_hypopnea_index
    return TimingRecord(
        night_id=night.id,
        label=format_local(night.end_utc, night.timezone, ROW_LABEL_FORMAT, apply_timezone),
        timezone=night.timezone,
        start_utc=night.start_utc,
        end_utc=night.end_utc,
        base_minutes=base,
        duration_minutes=duration,
        latency_minutes=night.sleep_latency_minutes,
        out_of_bed_count=night.out_of_bed_count,
        ahi=int(round(ahi)) if ahi is not None else None,
        snoring_minutes=night.snoring_minutes,
        hr_average=night.hr_average,
        sleep_efficiency_percent=night.sleep_efficiency_percent,
        time_in_bed_hours=night.total_timeinbed_hours,
        time_asleep_hours=night.total_sleep_time_hours,
    )


def build_wake_segment(episode: WakeEpisode, record: TimingRecord, apply_timezone: bool = True) -> WakeSegment:
    """Place a wake episode on its night's row, in the night's own zone"""
    start = minutes_from_noon(episode.start, record.timezone, apply_timezone)
    end = minutes_from_noon(episode.end, record.timezone, apply_timezone)

    # Keep the overlay on the same side of the wrap as its night
    start_on_axis = start + MINUTES_PER_DAY if start < record.base_minutes else start

    return WakeSegment(
        night_id=record.night_id,
        label=record.label,
        start=episode.start,
        end=episode.end,
        start_minutes=start_on_axis,
        duration_minutes=wrapped_duration(start, end),
    )


def axis_ticks(records: List[TimingRecord], padding_minutes: int = 30) -> List[AxisTick]:
    """Hourly ticks covering the occupied part of the axis, with padding"""
    if not records:
        return []
    low = min(record.base_minutes for record in records) - padding_minutes
    high = max(record.end_minutes for record in records) + padding_minutes
    return [AxisTick(value=value, text=tick_label(value))
            for value in range(0, AXIS_END_MINUTES + 1, TICK_STEP_MINUTES)
            if low <= value <= high]


def build_timing_layout(nights: Iterable[NightSummary], wake_episodes: Iterable[WakeEpisode] = (),
                        apply_timezone: bool = True, tick_padding_minutes: int = 30) -> TimingLayout:
    """
    Build the timeline rows, wake overlays and axis ticks for a set of nights

    Args:
        nights: Normalized nights; invalid intervals are left out
        wake_episodes: Retained wake episodes for any of the nights
        apply_timezone: Use each night's zone; UTC when False
        tick_padding_minutes: Axis padding around the occupied range

    Returns:
        TimingLayout with records ordered by end instant
    """
    ordered = sorted((night for night in nights if night.has_valid_dates), key=lambda night: night.end_utc)
    records = [build_timing_record(night, apply_timezone) for night in ordered]

    by_id: Dict = {record.night_id: record for record in records}
    segments = []
    for episode in wake_episodes:
        record = by_id.get(episode.night_id)
        if record is None:
            logger.debug(f"Wake episode for night {episode.night_id} has no timeline row")
            continue
        segments.append(build_wake_segment(episode, record, apply_timezone))

    return TimingLayout(records=records, wake_segments=segments,
                        ticks=axis_ticks(records, tick_padding_minutes))
