"""
Module for building per-night chart descriptions from epoch samples.

Nothing is drawn here: the output is plain structured data (traces,
markers, axis hints) for a chart renderer.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sleep_report.core.models.data_models import EpochSample, NightSummary
from sleep_report.core.models.output_models import ChartMarker, ChartSpec, ChartTrace, NightMeta
from sleep_report.utils.constants import nightly_chart_metrics, night_event_styles, sleep_stage_styles
from sleep_report.utils.time_utils import (
    DISPLAY_DATETIME_FORMAT, DISPLAY_MINUTE_FORMAT, format_local, is_number, resolve_timezone,
)

logger = logging.getLogger(__name__)

LINE_COLOR = '#75baf5'
MIDNIGHT_COLOR = 'rgba(128, 128, 128, 0.5)'


def _display(instant: datetime, tz_name: str, apply_timezone: bool) -> str:
    return format_local(instant, tz_name, DISPLAY_DATETIME_FORMAT, apply_timezone)


def night_event_markers(night_events, first_sample: datetime, tz_name: str,
                        apply_timezone: bool = True) -> List[ChartMarker]:
    """
    Vertical markers for the vendor's night events

    Args:
        night_events: Mapping of event code ('1'..'4') to offsets in seconds
        first_sample: Instant the offsets are counted from
        tz_name: Night timezone
        apply_timezone: Use the night's zone; UTC when False

    Returns:
        One marker per known event offset
    """
    if not isinstance(night_events, dict):
        return []

    markers = []
    for code, offsets in night_events.items():
        style = night_event_styles.get(str(code))
        if style is None or not isinstance(offsets, list):
            continue
        for offset in offsets:
            if not is_number(offset):
                continue
            instant = first_sample + timedelta(seconds=float(offset))
            markers.append(ChartMarker(x=_display(instant, tz_name, apply_timezone),
                                       name=style['name'], color=style['color']))
    return markers


def midnight_marker(first: datetime, last: datetime, tz_name: str,
                    apply_timezone: bool = True) -> Optional[ChartMarker]:
    """Marker at the first local midnight after the first sample, if the night reaches it"""
    zone = resolve_timezone(tz_name, apply_timezone)
    local_first = first.astimezone(zone)
    midnight = datetime.combine(local_first.date() + timedelta(days=1), time.min, tzinfo=zone)

    if not first < midnight < last:
        return None
    return ChartMarker(x=_display(midnight.astimezone(timezone.utc), tz_name, apply_timezone),
                       name='Midnight', color=MIDNIGHT_COLOR)


def sleep_stage_chart(samples: List[EpochSample], tz_name: str, apply_timezone: bool,
                      markers: List[ChartMarker]) -> ChartSpec:
    """
    Stepped stage chart: one trace per run of equal state

    Each run is extended to the first point of the next run so the steps join.
    """
    traces = []
    runs: List[List[EpochSample]] = []
    for sample in samples:
        if runs and runs[-1][-1].state == sample.state:
            runs[-1].append(sample)
        else:
            runs.append([sample])

    for index, run in enumerate(runs):
        style = sleep_stage_styles[int(run[0].state)]
        x = [_display(sample.datetime_utc, tz_name, apply_timezone) for sample in run]
        y = [float(sample.state) for sample in run]
        text = [style['name']] * len(run)

        if index + 1 < len(runs):
            x.append(_display(runs[index + 1][0].datetime_utc, tz_name, apply_timezone))
            y.append(y[-1])
            text.append(style['name'])

        traces.append(ChartTrace(name=style['name'], color=style['color'], x=x, y=y, text=text, shape='hv'))

    return ChartSpec(
        kind='sleep_stage',
        title='Sleep Stages',
        y_label='Sleep Stage',
        traces=traces,
        markers=markers,
        y_axis={
            'tickvals': sorted(sleep_stage_styles),
            'ticktext': [sleep_stage_styles[key]['name'] for key in sorted(sleep_stage_styles)],
            'autorange': 'reversed',
        },
    )


def metric_chart(samples: List[EpochSample], metric: str, label: str, tz_name: str,
                 apply_timezone: bool, markers: List[ChartMarker]) -> Optional[ChartSpec]:
    """Line chart of one epoch metric; None when fewer than two points are numeric"""
    points = [(sample, getattr(sample, metric)) for sample in samples if getattr(sample, metric) is not None]
    if len(points) < 2:
        return None

    trace = ChartTrace(
        name=label,
        color=LINE_COLOR,
        x=[_display(sample.datetime_utc, tz_name, apply_timezone) for sample, _ in points],
        y=[value for _, value in points],
    )
    return ChartSpec(kind='metric', title=label, y_label=label, metric=metric,
                     traces=[trace], markers=markers, y_axis={'rangemode': 'tozero'})


def build_charts_for_night(samples: List[EpochSample], night: NightSummary,
                           apply_timezone: bool = True) -> List[ChartSpec]:
    """Stage chart first, then one chart per plottable metric"""
    ordered = sorted(samples, key=lambda sample: sample.timestamp)
    if not ordered:
        return []

    first, last = ordered[0].datetime_utc, ordered[-1].datetime_utc
    markers = night_event_markers(night.night_events, first, night.timezone, apply_timezone)
    midnight = midnight_marker(first, last, night.timezone, apply_timezone)
    if midnight is not None:
        markers.append(midnight)

    charts = [sleep_stage_chart(ordered, night.timezone, apply_timezone, markers)]
    for metric, label in nightly_chart_metrics:
        chart = metric_chart(ordered, metric, label, night.timezone, apply_timezone, markers)
        if chart is not None:
            charts.append(chart)
    return charts


def build_night_charts(samples: Iterable[EpochSample], nights: Iterable[NightSummary],
                       apply_timezone: bool = True) -> Dict[str, List[ChartSpec]]:
    """
    Chart descriptions for every night that has epoch samples

    Args:
        samples: Epoch samples for any of the nights
        nights: Normalized nights
        apply_timezone: Use each night's zone; UTC when False

    Returns:
        Mapping of str(night id) to its ordered chart list
    """
    by_night: Dict = {}
    for sample in samples:
        by_night.setdefault(sample.night_id, []).append(sample)

    charts = {}
    for night in nights:
        night_samples = by_night.get(night.id)
        if night_samples:
            charts[str(night.id)] = build_charts_for_night(night_samples, night, apply_timezone)

    logger.info(f"Built chart descriptions for {len(charts)} nights")
    return charts


def build_night_meta(nights: Iterable[NightSummary], apply_timezone: bool = True) -> Dict[str, NightMeta]:
    """Label and local start/end strings per night, for detail views"""
    return {
        str(night.id): NightMeta(
            label=night.label,
            start=format_local(night.start_utc, night.timezone, DISPLAY_MINUTE_FORMAT, apply_timezone),
            end=format_local(night.end_utc, night.timezone, DISPLAY_MINUTE_FORMAT, apply_timezone),
        )
        for night in nights
    }
