import logging

import pytest

from sleep_report.config.config_manager import ConfigManager, configure_logging
from sleep_report.core.exceptions import UnrecognizedShapeError
from sleep_report.core.services.report_service import ReportService


def test_config_defaults():
    config = ConfigManager()

    assert config.get("ingest.column_prefix") == "w_"
    assert config.get("wake_episodes.min_duration_seconds") == 600
    assert config.get("timing.apply_timezone") is True
    assert config.get("missing.key", "fallback") == "fallback"


def test_config_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("filters:\n  nap_filter_enabled: true\n")

    config = ConfigManager(path)

    assert config.get("filters.nap_filter_enabled") is True
    assert config.get("filters.nap_min_hours") == 3.0


def test_configure_logging_applies_level():
    configure_logging(ConfigManager(overrides={"logging": {"level": "DEBUG"}}))
    assert logging.getLogger().handlers


def test_full_pipeline(vendor_rows, epoch_records):
    report = ReportService().build(vendor_rows, epoch_records=epoch_records, label="LAB-1")

    assert report.label == "LAB-1"
    assert [night.id for night in report.nights] == [101, 102]
    assert report.has_epoch_data
    assert [episode.night_id for episode in report.wake_episodes] == [101]
    assert [record.night_id for record in report.timing.records] == [101, 102]
    assert len(report.timing.wake_segments) == 1
    assert list(report.night_charts) == ["101"]
    assert set(report.night_meta) == {"101", "102"}
    assert report.statistics.summary.total_nights == 2
    assert len(report.summary_table) == 2
    assert len(report.epoch_table) == 8
    assert report.warnings == []


def test_filters_are_applied(vendor_rows, epoch_records):
    report = ReportService().build(vendor_rows, epoch_records=epoch_records,
                                   start_date="2024-01-07", end_date="2024-01-31")

    assert [night.id for night in report.nights] == [102]
    assert report.samples == []
    assert report.night_charts == {}


def test_nap_filter_from_config(vendor_rows):
    config = ConfigManager(overrides={"filters": {"nap_filter_enabled": True, "nap_min_hours": 6.8}})

    report = ReportService(config).build(vendor_rows)

    assert [night.id for night in report.nights] == [101]


def test_recoverable_problems_are_reported(vendor_rows):
    vendor_rows[1]["startdate"] = "garbage"

    report = ReportService().build(vendor_rows)

    assert len(report.nights) == 2
    assert [record.night_id for record in report.timing.records] == [101]
    assert any(warning.night_id == 102 for warning in report.warnings)


def test_empty_batch_gives_empty_report():
    report = ReportService().build([])

    assert report.nights == []
    assert report.timing.records == []
    assert report.statistics.summary.total_nights == 0
    assert not report.has_epoch_data


def test_unrecognized_shape_propagates():
    with pytest.raises(UnrecognizedShapeError):
        ReportService().build([{"foo": 1}])
