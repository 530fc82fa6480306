# sleep_report/core/data/repository.py
import io
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd

from sleep_report.core.data_processing.epoch_flattener import samples_from_table
from sleep_report.core.ingest.normalizer_manager import rows_from_input
from sleep_report.core.models.data_models import EpochSample, NightSummary, ProcessingWarning
from sleep_report.utils.constants import epoch_table_columns
from sleep_report.utils.field_catalog import DEFAULT_CATALOG, FieldCatalog
from sleep_report.utils.time_utils import epoch_seconds

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, io.IOBase]


class TabularRepository:
    """Tabular export and re-import of nights and epoch samples"""

    def __init__(self, catalog: Optional[FieldCatalog] = None):
        self.catalog = catalog or DEFAULT_CATALOG

    def summary_columns(self, prefix: Optional[str] = None) -> List[str]:
        """
        Stable column order of the summary table

        With a prefix, identity, date and raw columns carry it so the table
        reads back as a prefixed export; label and derived columns never do.
        """
        p = prefix or ""
        columns = [f"{p}id", f"{p}timezone", "label"]
        if prefix:
            columns += [f"{p}startdate", f"{p}enddate"]
        else:
            columns += ["startdate_utc", "enddate_utc", "startdate", "enddate"]
        columns += [f"{p}{name}" for name in self.catalog.names()]
        columns += [f"{p}night_events"]
        columns += [field.derived_name for field in self.catalog.converted_fields()]
        return columns

    def _summary_row(self, night: NightSummary, prefix: Optional[str]) -> Dict[str, Any]:
        p = prefix or ""
        row = {f"{p}id": night.id, f"{p}timezone": night.timezone, "label": night.label}

        if prefix:
            row[f"{p}startdate"] = epoch_seconds(night.start_utc)
            row[f"{p}enddate"] = epoch_seconds(night.end_utc)
        else:
            row["startdate_utc"] = night.start_utc.isoformat() if night.start_utc else None
            row["enddate_utc"] = night.end_utc.isoformat() if night.end_utc else None
            row["startdate"] = epoch_seconds(night.start_utc)
            row["enddate"] = epoch_seconds(night.end_utc)

        for name in self.catalog.names():
            row[f"{p}{name}"] = getattr(night, name)

        events = night.night_events
        row[f"{p}night_events"] = json.dumps(events) if events is not None else None

        for field in self.catalog.converted_fields():
            row[field.derived_name] = getattr(night, field.derived_name)
        return row

    def export_summary_table(self, nights: Iterable[NightSummary], prefix: Optional[str] = None) -> pd.DataFrame:
        """
        Export nights as a DataFrame

        Args:
            nights: Normalized nights
            prefix: Optional column prefix (e.g. "w_") for a prefixed export

        Returns:
            DataFrame with one row per night in input order
        """
        rows = [self._summary_row(night, prefix) for night in nights]
        return pd.DataFrame(rows, columns=self.summary_columns(prefix))

    def export_epoch_table(self, samples: Iterable[EpochSample]) -> pd.DataFrame:
        """Export samples with the fixed epoch column list"""
        rows = []
        for sample in samples:
            row = sample.model_dump()
            row["id"] = row.pop("night_id")
            row["state"] = int(sample.state)
            rows.append(row)
        return pd.DataFrame(rows, columns=list(epoch_table_columns))

    def read_summary_table(self, source: Source) -> List[Dict[str, Any]]:
        """
        Read a summary CSV into raw rows for the normalizer

        Args:
            source: Path, file object or CSV text

        Returns:
            Row dictionaries with empty cells as None
        """
        df = self._read_csv(source)
        logger.info(f"Read {len(df)} summary rows")
        return rows_from_input(df)

    def read_epoch_table(self, source: Source) -> Tuple[List[EpochSample], List[ProcessingWarning]]:
        df = self._read_csv(source)
        logger.info(f"Read {len(df)} epoch rows")
        return samples_from_table(df)

    @staticmethod
    def to_csv_text(df: pd.DataFrame) -> str:
        return df.to_csv(index=False)

    @staticmethod
    def _read_csv(source: Source) -> pd.DataFrame:
        # Multi-line strings are CSV text rather than a path
        if isinstance(source, str) and "\n" in source:
            source = io.StringIO(source)
        return pd.read_csv(source, float_precision="round_trip")
