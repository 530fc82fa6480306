import pytest

from sleep_report.core.analysis.sleep_metrics import (
    aggregate_by_day_type, aggregate_metric, aggregate_values, classify_ahi, classify_snoring,
    extract_values, split_by_day_type,
)
from sleep_report.core.reporting.report_generator import (
    build_statistics, format_hours_minutes, metrics_table, sleep_ritual, sleep_vitals,
    summarize_nights,
)


def test_ahi_severity_scenario_e():
    labels = [classify_ahi(value)[0] for value in [2, 10, 22, 40]]
    assert labels == ["none/minimal", "mild", "moderate", "severe"]


@pytest.mark.parametrize("minutes,label", [(0, "none"), (10, "mild"), (15, "mild"), (30, "moderate"),
                                           (45, "heavy"), (60, "heavy"), (61, "severe")])
def test_snoring_severity(minutes, label):
    assert classify_snoring(minutes)[0] == label


def test_ahi_band_edges_are_inclusive():
    assert classify_ahi(5)[0] == "none/minimal"
    assert classify_ahi(15)[0] == "mild"
    assert classify_ahi(30)[0] == "moderate"
    assert classify_ahi(30.01)[0] == "severe"


def test_population_standard_deviation():
    aggregate = aggregate_values("x", [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])

    assert aggregate.mean == 5.0
    assert aggregate.std == 2.0
    assert aggregate.min == 2.0
    assert aggregate.max == 9.0
    assert aggregate.count == 8


def test_empty_aggregate_is_zero_based():
    aggregate = aggregate_values("x", [])

    assert aggregate.count == 0
    assert aggregate.mean == 0.0
    assert aggregate.std == 0.0
    assert aggregate.min is None and aggregate.max is None


def test_extract_values_prefers_unprefixed_key():
    rows = [{"snoring": 60, "w_snoring": 120}, {"w_snoring": 180}, {"snoring": "bad"}, {"snoring": None}]
    assert extract_values(rows, "snoring") == [60.0, 180.0]


def test_extract_values_falls_back_on_nan():
    rows = [{"snoring": float("nan"), "w_snoring": 600}, {"snoring": "", "w_snoring": 300}]
    assert extract_values(rows, "snoring") == [600.0, 300.0]


def test_aggregate_metric_converts_units(nights):
    efficiency = aggregate_metric(nights, "sleep_efficiency")
    duration = aggregate_metric(nights, "total_sleep_time")
    snoring = aggregate_metric(nights, "snoring")

    assert efficiency.unit == "percent"
    assert efficiency.mean == pytest.approx(84.5)
    assert duration.unit == "hours"
    assert duration.values == [7.0, 6.5]
    assert snoring.unit == "minutes"
    assert snoring.mean == pytest.approx(27.5)
    assert snoring.severity == "moderate"


def test_weekday_weekend_split(nights):
    weekday, weekend = split_by_day_type(nights)

    assert [night.id for night in weekday] == [102]
    assert [night.id for night in weekend] == [101]

    split = aggregate_by_day_type(nights, "total_sleep_time")
    assert split.weekday.mean == 6.5
    assert split.weekend.mean == 7.0


def test_summary(nights):
    summary = summarize_nights(nights)

    assert summary.total_nights == 2
    assert summary.first_date == "2024-01-05"
    assert summary.last_date == "2024-01-09"
    assert summary.mean_duration_hours == pytest.approx(6.75)
    assert summary.ahi.mean == 12.0


def test_metrics_table_skips_empty_fields(nights):
    rows = metrics_table(nights)
    fields = [row.aggregate.field for row in rows]

    assert "total_sleep_time" in fields
    assert "rr_average" not in fields
    assert fields.index("total_timeinbed") < fields.index("hr_average")

    tst = next(row for row in rows if row.aggregate.field == "total_sleep_time")
    assert [(point.date, point.value) for point in tst.series] == [("2024-01-06", 7.0), ("2024-01-09", 6.5)]


def test_sleep_ritual_averages_on_noon_axis(nights):
    ritual = sleep_ritual(nights)

    assert ritual.weekend.bedtime == "23:00"
    assert ritual.weekend.asleep_time == "23:10"
    assert ritual.weekend.wake_time == "07:00"
    assert ritual.weekend.get_up_time == "07:05"
    assert ritual.weekday.bedtime == "23:30"
    assert ritual.weekday.asleep_time == "23:50"


def test_sleep_vitals(nights):
    vitals = sleep_vitals(nights)

    assert vitals.ahi.min == 2.0
    assert vitals.ahi_min_severity == "none/minimal"
    assert vitals.ahi_max_severity == "moderate"
    assert vitals.mean_heart_rate == 60.0
    assert vitals.heart_rate_min == 49.0
    assert vitals.heart_rate_max == 80.0


def test_format_hours_minutes():
    assert format_hours_minutes(7.5) == "7h30"
    assert format_hours_minutes(6.0) == "6h00"
    assert format_hours_minutes(None) == "-"


def test_statistics_on_empty_set():
    statistics = build_statistics([])

    assert statistics.summary.total_nights == 0
    assert statistics.summary.first_date is None
    assert statistics.metrics == []
    assert statistics.vitals.ahi.mean == 0.0
    assert statistics.ritual.weekday.bedtime is None
