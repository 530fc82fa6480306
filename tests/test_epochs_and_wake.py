from datetime import datetime, timezone

from sleep_report.core.analysis.wake_episodes import detect_all_wake_episodes, detect_wake_episodes
from sleep_report.core.data_processing.epoch_flattener import flatten_epochs, reference_field, samples_from_rows
from sleep_report.core.models.data_models import EpochSample, NightSummary, SleepStage

from conftest import NIGHT_1_START


def _night(start, end, night_id=1):
    return NightSummary(
        id=night_id,
        start_utc=datetime.fromtimestamp(start, tz=timezone.utc),
        end_utc=datetime.fromtimestamp(end, tz=timezone.utc),
    )


def _samples(states, step=300, start=0, night_id=1):
    return [EpochSample(night_id=night_id, timestamp=start + i * step, state=state)
            for i, state in enumerate(states)]


def test_flatten_scenario_b():
    night = _night(0, 1000)
    records = [{"sleep_id": 1, "series": [{"state": 1, "hr": {"100": 60, "160": 62}, "rr": {"100": 14}}]}]

    result = flatten_epochs(records, [night])

    assert [(s.timestamp, s.hr, s.rr) for s in result.samples] == [(100, 60.0, 14.0), (160, 62.0, None)]
    assert all(s.state == SleepStage.LIGHT for s in result.samples)
    assert result.warnings == []


def test_non_numeric_epoch_value_is_null_with_warning():
    night = _night(0, 1000)
    records = [{"sleep_id": 1, "series": [{"state": 1, "hr": {"100": "abc", "160": 62}}]}]

    result = flatten_epochs(records, [night])

    assert [(s.timestamp, s.hr) for s in result.samples] == [(100, None), (160, 62.0)]
    assert [(w.night_id, w.field) for w in result.warnings] == [(1, "hr")]


def test_non_object_segment_is_skipped_with_warning():
    night = _night(0, 1000)
    records = [{"sleep_id": 1, "series": ["oops", {"state": 1, "hr": {"100": 60}}]}]

    result = flatten_epochs(records, [night])

    assert [s.timestamp for s in result.samples] == [100]
    assert [w.field for w in result.warnings] == ["series"]


def test_table_rows_with_non_numeric_metric_warn():
    rows = [{"id": 1, "timestamp": 100, "state": 1, "hr": "n/a", "rr": None}]

    samples, warnings = samples_from_rows(rows)

    assert samples[0].hr is None
    assert [(w.field, w.row_index) for w in warnings] == [("hr", 0)]


def test_reference_field_follows_declared_order():
    segment = {"state": 0, "rr": {"5": 12}, "hr": {}, "snoring": {"5": 0, "10": 1}}
    assert reference_field(segment) == "rr"
    assert reference_field({"state": 0, "hr": {}}) is None


def test_flatten_fixture_records(nights, epoch_records):
    result = flatten_epochs(epoch_records, nights)

    timestamps = [s.timestamp - NIGHT_1_START for s in result.samples]
    assert timestamps == [0, 300, 600, 900, 1200, 1500, 1800, 2100]
    assert all(s.night_id == 101 for s in result.samples)
    # segment with an empty hr map falls back to rr
    assert result.samples[-1].rr == 13.0
    assert result.samples[-1].hr is None
    assert result.samples[5].snoring == 1.0


def test_flatten_skips_unknown_nights_and_bad_timestamps():
    night = _night(0, 1000)
    records = [
        {"sleep_id": 99, "series": [{"state": 0, "hr": {"1": 50}}]},
        {"sleep_id": 1, "series": [{"state": 0, "hr": {"abc": 50, "20": 51}}, {"state": 1}]},
    ]

    result = flatten_epochs(records, [night])

    assert [s.timestamp for s in result.samples] == [20]
    assert len(result.warnings) == 2


def test_wake_episode_scenario_c():
    night = _night(0, 1200)
    samples = _samples([0, 0, 0, 1, 1])

    episodes = detect_wake_episodes(samples, night)

    assert len(episodes) == 1
    assert episodes[0].start == datetime.fromtimestamp(0, tz=timezone.utc)
    assert episodes[0].end == datetime.fromtimestamp(600, tz=timezone.utc)
    assert episodes[0].duration_seconds == 600


def test_short_wake_runs_are_dropped():
    night = _night(0, 3000)
    samples = _samples([1, 0, 0, 1, 2, 0, 1])

    assert detect_wake_episodes(samples, night) == []


def test_trailing_wake_run_ends_at_night_end():
    night = _night(0, 2000)
    samples = _samples([1, 1, 0, 0])  # awake from 600 to the end

    episodes = detect_wake_episodes(samples, night)

    assert len(episodes) == 1
    assert episodes[0].end == night.end_utc
    assert episodes[0].duration_seconds == 1400


def test_wake_episode_is_clipped_to_night():
    night = _night(300, 1500)
    samples = _samples([0, 0, 0, 0, 1, 1])  # awake 0..900

    episodes = detect_wake_episodes(samples, night)

    assert len(episodes) == 1
    assert episodes[0].start == night.start_utc
    assert episodes[0].duration_seconds == 600


def test_unsorted_samples_are_handled():
    night = _night(0, 1200)
    samples = list(reversed(_samples([0, 0, 0, 1, 1])))

    assert len(detect_wake_episodes(samples, night)) == 1


def test_nights_without_samples_have_no_episodes(nights, epoch_records):
    samples = flatten_epochs(epoch_records, nights).samples

    episodes = detect_all_wake_episodes(samples, nights)

    assert [e.night_id for e in episodes] == [101]
    assert episodes[0].duration_seconds == 900
