"""
Base normalizer class for raw sleep summary rows.
All shape-specific normalizers inherit from this class.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sleep_report.core.exceptions import MissingColumnError
from sleep_report.core.models.data_models import InputShape, NightSummary, ProcessingWarning
from sleep_report.utils.field_catalog import DEFAULT_CATALOG, FieldCatalog
from sleep_report.utils.time_utils import is_known_timezone, is_missing, is_number, parse_instant

logger = logging.getLogger(__name__)

STAGE = "normalize"


class BaseSummaryNormalizer:
    """Base class for summary normalizers"""

    shape: Optional[InputShape] = None

    def __init__(self, catalog: Optional[FieldCatalog] = None, prefix: str = "w_",
                 default_timezone: str = "UTC"):
        """
        Initialize the normalizer

        Args:
            catalog: Field catalogue used for derived display-unit fields
            prefix: Column prefix used by prefixed tabular exports
            default_timezone: Zone assigned to rows that carry none
        """
        self.catalog = catalog or DEFAULT_CATALOG
        self.prefix = prefix
        self.default_timezone = default_timezone

    def matches(self, keys: Iterable[str]) -> bool:
        """Shape-detection predicate over the batch key set"""
        raise NotImplementedError("Subclasses must implement matches")

    def required_columns(self) -> Tuple[str, ...]:
        """Any one of these identifying columns must be present"""
        return ("id",)

    def check_columns(self, keys: Iterable[str]) -> None:
        keys = set(keys)
        required = self.required_columns()
        if not any(column in keys for column in required):
            raise MissingColumnError(
                f"{self.shape.value} input is missing its identifying column "
                f"(expected one of: {', '.join(required)})"
            )

    def normalize_batch(self, rows: List[Dict[str, Any]], label: Optional[str] = None
                        ) -> Tuple[List[NightSummary], List[ProcessingWarning]]:
        """
        Normalize every row of a batch already known to have this shape

        Args:
            rows: Raw rows
            label: Optional label overriding any per-row label

        Returns:
            Tuple of (nights, warnings)
        """
        nights = []
        warnings: List[ProcessingWarning] = []

        for index, row in enumerate(rows):
            night, row_warnings = self.normalize(row, row_index=index, label=label)
            nights.append(night)
            warnings.extend(row_warnings)

        return nights, warnings

    def normalize(self, row: Dict[str, Any], row_index: int = 0, label: Optional[str] = None
                  ) -> Tuple[NightSummary, List[ProcessingWarning]]:
        """Normalize one raw row into a NightSummary"""
        flat = self._flatten_row(row)
        start_raw, end_raw = self._date_values(flat)
        return self._build_summary(flat, start_raw, end_raw, row_index, label)

    def _flatten_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shape-specific conversion of a raw row into unprefixed, un-nested keys

        Args:
            row: Raw row

        Returns:
            Flat dictionary using canonical field names
        """
        # This method should be overridden by subclasses
        raise NotImplementedError("Subclasses must implement _flatten_row")

    def _date_values(self, flat: Dict[str, Any]) -> Tuple[Any, Any]:
        return flat.get("startdate"), flat.get("enddate")

    def _build_summary(self, flat: Dict[str, Any], start_raw: Any, end_raw: Any,
                       row_index: int, label: Optional[str]
                       ) -> Tuple[NightSummary, List[ProcessingWarning]]:
        warnings: List[ProcessingWarning] = []
        night_id = self._night_id(flat, row_index)

        def warn(message, field=None):
            logger.warning(f"Row {row_index} (night {night_id}): {message}")
            warnings.append(ProcessingWarning(stage=STAGE, message=message, night_id=night_id,
                                              row_index=row_index, field=field))

        record: Dict[str, Any] = {
            "id": night_id,
            "timezone": self._timezone(flat, warn),
            "label": self._label(flat, label),
        }

        # Dates: keep the row even when they cannot be parsed
        for field, raw in (("start_utc", start_raw), ("end_utc", end_raw)):
            instant = parse_instant(raw)
            if instant is None:
                warn(f"Invalid date {raw!r}", field)
            record[field] = instant

        if record["start_utc"] is not None and record["end_utc"] is not None \
                and record["start_utc"] > record["end_utc"]:
            warn("Start date is after end date", "start_utc")

        # Raw numeric fields
        for name in self.catalog.names():
            value = flat.get(name)
            if is_missing(value):
                record[name] = None
            elif is_number(value):
                record[name] = float(value)
            else:
                warn(f"Non-numeric value {value!r}", name)
                record[name] = None

        # A negative AHI is the vendor's "no measurement" marker
        ahi = record.get("apnea_hypopnea_index")
        if ahi is not None and ahi < 0:
            logger.debug(f"Night {night_id}: negative AHI {ahi} treated as missing")
            record["apnea_hypopnea_index"] = None

        # Derived display-unit fields
        for field in self.catalog.converted_fields():
            value = record.get(field.name)
            record[field.derived_name] = field.convert(value) if value is not None else None

        record["night_events"] = self._night_events(flat.get("night_events"), warn)

        return NightSummary(**record), warnings

    def _night_id(self, flat: Dict[str, Any], row_index: int):
        night_id = flat.get("id")
        if is_missing(night_id):
            raise MissingColumnError(f"Row {row_index} has no night id")
        # CSV readers turn integer ids into floats when the column has gaps
        if is_number(night_id):
            return int(night_id) if float(night_id).is_integer() else str(night_id)
        if isinstance(night_id, (int, str)):
            return night_id
        raise MissingColumnError(f"Row {row_index} has an unusable night id {night_id!r}")

    def _timezone(self, flat: Dict[str, Any], warn) -> str:
        tz_name = flat.get("timezone")
        if is_missing(tz_name) or not isinstance(tz_name, str):
            warn(f"Missing timezone, using {self.default_timezone}", "timezone")
            return self.default_timezone
        if not is_known_timezone(tz_name):
            warn(f"Unknown timezone {tz_name!r}; local times fall back to UTC", "timezone")
        return tz_name

    def _label(self, flat: Dict[str, Any], label: Optional[str]) -> str:
        if label is not None:
            return label
        row_label = flat.get("label")
        return "" if is_missing(row_label) else str(row_label)

    def _night_events(self, value: Any, warn) -> Any:
        if is_missing(value):
            return None
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                warn(f"Could not parse night_events string: {value!r}", "night_events")
                return None
        if isinstance(value, (dict, list)):
            return value
        warn(f"Unsupported night_events value: {value!r}", "night_events")
        return None
