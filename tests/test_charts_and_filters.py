from datetime import date

from sleep_report.core.analysis.sleep_visualization import build_night_charts, build_night_meta
from sleep_report.core.data_processing.epoch_flattener import flatten_epochs
from sleep_report.core.data_processing.filters import (
    filter_by_date_range, filter_epochs_to_nights, filter_naps,
)
from sleep_report.core.models.data_models import NightSummary


def test_date_range_uses_whole_utc_days(nights):
    assert [n.id for n in filter_by_date_range(nights, "2024-01-06", "2024-01-06")] == [101]
    assert [n.id for n in filter_by_date_range(nights, date(2024, 1, 7), None)] == [102]
    assert [n.id for n in filter_by_date_range(nights, None, "2024-01-09")] == [101, 102]


def test_date_range_drops_invalid_nights(nights):
    invalid = NightSummary(id=9)
    assert [n.id for n in filter_by_date_range(list(nights) + [invalid])] == [101, 102]


def test_nap_filter(nights):
    assert [n.id for n in filter_naps(nights, 6.8)] == [101]
    assert [n.id for n in filter_naps(nights, 6.5)] == [101, 102]


def test_epochs_follow_surviving_nights(nights, epoch_records):
    samples = flatten_epochs(epoch_records, nights).samples
    assert filter_epochs_to_nights(samples, nights[1:]) == []
    assert len(filter_epochs_to_nights(samples, nights)) == len(samples)


def test_night_charts(nights, epoch_records):
    samples = flatten_epochs(epoch_records, nights).samples

    charts = build_night_charts(samples, nights)

    assert list(charts) == ["101"]
    kinds = [(chart.kind, chart.metric) for chart in charts["101"]]
    # hr has 7 points, rr has 2, snoring only 1
    assert kinds == [("sleep_stage", None), ("metric", "hr"), ("metric", "rr")]


def test_stage_chart_steps_join(nights, epoch_records):
    samples = flatten_epochs(epoch_records, nights).samples

    stage_chart = build_night_charts(samples, nights)["101"][0]

    assert [trace.name for trace in stage_chart.traces] == ["Awake", "Light", "Deep"]
    awake, light, deep = stage_chart.traces
    assert awake.x[-1] == light.x[0]
    assert light.x[-1] == deep.x[0]
    assert awake.y == [0.0] * 5
    assert awake.shape == "hv"
    # local Paris time
    assert awake.x[0] == "2024-01-05 23:00:00"


def test_night_event_and_midnight_markers(nights, epoch_records):
    samples = flatten_epochs(epoch_records, nights).samples

    markers = build_night_charts(samples, nights)["101"][0].markers

    names = [marker.name for marker in markers]
    assert names[:4] == ["Got in Bed", "Fell Asleep", "Woke Up", "Got out of Bed"]
    assert markers[1].x == "2024-01-05 23:10:00"
    # samples only cover the first 35 minutes, so no midnight marker
    assert "Midnight" not in names


def test_night_meta(nights):
    meta = build_night_meta(nights)

    assert meta["101"].label == "LAB-1"
    assert meta["101"].start == "2024-01-05 23:00"
    assert meta["101"].end == "2024-01-06 07:00"
    assert build_night_meta(nights, apply_timezone=False)["101"].start == "2024-01-05 22:00"
