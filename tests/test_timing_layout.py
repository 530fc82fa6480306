from datetime import datetime, timezone

import pytest

from sleep_report.core.analysis.timing_layout import (
    build_timing_layout, build_timing_record, tick_label, wrapped_duration,
)
from sleep_report.core.models.data_models import NightSummary, WakeEpisode
from sleep_report.utils.time_utils import minutes_from_noon


def _night(start, end, tz="UTC", night_id=1, **fields):
    return NightSummary(id=night_id, timezone=tz, start_utc=start, end_utc=end, **fields)


def test_scenario_d_local_night(nights):
    # 23:00 -> 07:00 in Europe/Paris
    record = build_timing_record(nights[0])

    assert record.base_minutes == 660
    assert record.end_minutes == 1140
    assert record.duration_minutes == 480
    assert record.label == "06 Jan"


def test_apply_timezone_false_uses_utc(nights):
    record = build_timing_record(nights[0], apply_timezone=False)

    # 22:00 -> 06:00 UTC
    assert record.base_minutes == 600
    assert record.duration_minutes == 480


def test_night_crossing_the_noon_wrap():
    night = _night(datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc),
                   datetime(2024, 1, 5, 14, 0, tzinfo=timezone.utc))

    record = build_timing_record(night)

    assert record.base_minutes == 1320
    assert record.duration_minutes == 240
    assert record.end_minutes == 1560


@pytest.mark.parametrize("hour,minute,expected", [(12, 0, 0), (0, 0, 720), (11, 59, 1439), (23, 0, 660)])
def test_minutes_from_noon_range(hour, minute, expected):
    instant = datetime(2024, 3, 1, hour, minute, tzinfo=timezone.utc)
    assert minutes_from_noon(instant, "UTC") == expected


def test_wrapped_duration():
    assert wrapped_duration(660, 1140) == 480
    assert wrapped_duration(1320, 120) == 240
    assert wrapped_duration(100, 100) == 0


def test_sub_minute_night_gets_one_minute():
    short = _night(datetime(2024, 1, 5, 23, 0, 5, tzinfo=timezone.utc),
                   datetime(2024, 1, 5, 23, 0, 50, tzinfo=timezone.utc))
    instant = _night(datetime(2024, 1, 5, 23, 0, tzinfo=timezone.utc),
                     datetime(2024, 1, 5, 23, 0, tzinfo=timezone.utc))

    assert build_timing_record(short).duration_minutes == 1
    assert build_timing_record(instant).duration_minutes == 0


def test_annotations_are_copied(nights):
    record = build_timing_record(nights[1])

    assert record.ahi == 22
    assert record.latency_minutes == 20.0
    assert record.snoring_minutes == 45.0
    assert record.hr_average == 62.0
    assert record.time_in_bed_hours == 7.5


def test_layout_orders_by_end_and_skips_invalid(nights):
    invalid = NightSummary(id=3, start_utc=None, end_utc=None)

    layout = build_timing_layout([nights[1], invalid, nights[0]])

    assert [record.night_id for record in layout.records] == [101, 102]


def test_wake_segments_share_the_night_row(nights):
    night = nights[0]
    episode = WakeEpisode(night_id=101, start=night.start_utc,
                          end=datetime(2024, 1, 5, 22, 15, tzinfo=timezone.utc), duration_seconds=900)

    layout = build_timing_layout(nights, [episode])

    assert len(layout.wake_segments) == 1
    segment = layout.wake_segments[0]
    assert segment.label == layout.records[0].label
    assert segment.start_minutes == 660
    assert segment.duration_minutes == 15


def test_ticks_cover_the_occupied_range(nights):
    layout = build_timing_layout(nights)

    values = [tick.value for tick in layout.ticks]
    # bars span 660 (23:00) to 1140 (07:00), padded by 30 minutes
    assert values[0] == 660
    assert values[-1] == 1140
    assert layout.ticks[0].text == "11PM"
    assert tick_label(720) == "12AM"
    assert tick_label(0) == "12PM"


def test_empty_layout():
    layout = build_timing_layout([])
    assert layout.records == [] and layout.ticks == [] and layout.wake_segments == []
