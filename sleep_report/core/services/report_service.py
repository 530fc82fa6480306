# sleep_report/core/services/report_service.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sleep_report.config.config_manager import ConfigManager
from sleep_report.core.analysis.sleep_visualization import build_night_charts, build_night_meta
from sleep_report.core.analysis.timing_layout import build_timing_layout
from sleep_report.core.analysis.wake_episodes import detect_all_wake_episodes
from sleep_report.core.data.repository import TabularRepository
from sleep_report.core.data_processing.epoch_flattener import flatten_epochs
from sleep_report.core.data_processing.filters import (
    filter_by_date_range, filter_epochs_to_nights, filter_naps,
)
from sleep_report.core.ingest.normalizer_manager import NormalizerManager
from sleep_report.core.models.data_models import EpochSample
from sleep_report.core.models.output_models import ReportData
from sleep_report.core.reporting.report_generator import build_statistics
from sleep_report.utils.field_catalog import DEFAULT_CATALOG, FieldCatalog

logger = logging.getLogger(__name__)


class ReportService:
    """Runs the full pipeline for one batch of nights"""

    def __init__(self, config: Optional[ConfigManager] = None, catalog: Optional[FieldCatalog] = None):
        self.config = config or ConfigManager()
        self.catalog = catalog or DEFAULT_CATALOG
        self.normalizer = NormalizerManager(
            catalog=self.catalog,
            prefix=self.config.get('ingest.column_prefix', 'w_'),
            default_timezone=self.config.get('ingest.default_timezone', 'UTC'),
        )
        self.repository = TabularRepository(self.catalog)

    def build(self, summary_rows, epoch_records: Optional[Iterable[Dict[str, Any]]] = None,
              epoch_samples: Optional[List[EpochSample]] = None, label: Optional[str] = None,
              apply_timezone: Optional[bool] = None, start_date=None, end_date=None,
              nap_min_hours: Optional[float] = None) -> ReportData:
        """
        Normalize, filter and analyse a batch of nights

        Args:
            summary_rows: Raw summary rows (DataFrame, list of dicts or dict)
            epoch_records: Raw per-night epoch series, flattened here
            epoch_samples: Already-flat samples, used when epoch_records is None
            label: Label attached to every night
            apply_timezone: Show local times in each night's zone; defaults to config
            start_date: First UTC day kept (by end instant)
            end_date: Last UTC day kept (by end instant)
            nap_min_hours: Drop sessions shorter than this; defaults to config when the nap filter is enabled

        Returns:
            ReportData bundle

        Raises:
            UnrecognizedShapeError, MissingColumnError: for batches that cannot be read at all
        """
        if apply_timezone is None:
            apply_timezone = bool(self.config.get('timing.apply_timezone', True))
        if nap_min_hours is None and self.config.get('filters.nap_filter_enabled', False):
            nap_min_hours = float(self.config.get('filters.nap_min_hours', 3.0))

        normalized = self.normalizer.normalize(summary_rows, label=label)
        warnings = list(normalized.warnings)
        all_nights = normalized.nights

        # Epoch data is flattened against every night before filtering
        if epoch_records is not None:
            flattened = flatten_epochs(epoch_records, all_nights)
            samples = flattened.samples
            warnings.extend(flattened.warnings)
        else:
            samples = list(epoch_samples or [])

        nights = all_nights
        if start_date is not None or end_date is not None:
            nights = filter_by_date_range(nights, start_date, end_date)
        if nap_min_hours is not None:
            nights = filter_naps(nights, nap_min_hours)
        samples = filter_epochs_to_nights(samples, nights)

        wake_episodes = detect_all_wake_episodes(
            samples, nights, self.config.get('wake_episodes.min_duration_seconds', 600))

        timing = build_timing_layout(nights, wake_episodes, apply_timezone,
                                     self.config.get('timing.tick_padding_minutes', 30))

        logger.info(f"Report built for {len(nights)} nights, {len(samples)} samples, "
                    f"{len(warnings)} warnings")

        return ReportData(
            label=label or "",
            generated_at=datetime.now(timezone.utc),
            apply_timezone=apply_timezone,
            nights=nights,
            samples=samples,
            wake_episodes=wake_episodes,
            timing=timing,
            night_charts=build_night_charts(samples, nights, apply_timezone),
            night_meta=build_night_meta(nights, apply_timezone),
            statistics=build_statistics(nights, self.catalog, apply_timezone),
            summary_table=self.repository.export_summary_table(nights),
            epoch_table=self.repository.export_epoch_table(samples),
            warnings=warnings,
        )
