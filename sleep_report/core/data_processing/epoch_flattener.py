"""
Expansion of sparse per-night epoch series into dense EpochSample rows.

Each night record holds a list of segments. A segment carries one sleep
stage and a set of metric maps keyed by timestamp string. The first
non-empty metric in ``epoch_metric_fields`` order is the segment's
reference field: its timestamps are the samples emitted for the segment.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from sleep_report.core.models.data_models import EpochSample, NightSummary, ProcessingWarning, SleepStage
from sleep_report.core.models.output_models import FlattenResult
from sleep_report.utils.constants import epoch_metric_fields
from sleep_report.utils.time_utils import is_missing, is_number

logger = logging.getLogger(__name__)

STAGE = "flatten"


def reference_field(segment: Dict[str, Any]) -> Optional[str]:
    """
    Pick the vendor key whose timestamps define a segment's samples

    Args:
        segment: One raw epoch segment

    Returns:
        The first metric key (in declared order) holding a non-empty mapping, or None
    """
    for _, vendor_key in epoch_metric_fields:
        values = segment.get(vendor_key)
        if isinstance(values, dict) and values:
            return vendor_key
    return None


def _parse_timestamp(key: Any) -> Optional[int]:
    if is_number(key):
        return int(key) if float(key).is_integer() else None
    try:
        return int(str(key).strip())
    except ValueError:
        return None


def _metric_value(value: Any, field: str, warn) -> Optional[float]:
    """Float value of one metric; a present but non-numeric value is null with a warning"""
    if is_number(value):
        return float(value)
    if not is_missing(value):
        warn(f"Non-numeric {field} value {value!r}; kept as null", field)
    return None


def flatten_segment(night_id, segment: Dict[str, Any], warn) -> List[EpochSample]:
    """Dense samples for one segment; an empty list when it has no usable metric"""
    ref = reference_field(segment)
    if ref is None:
        return []

    try:
        state = SleepStage(int(segment.get("state")))
    except (TypeError, ValueError):
        warn(f"Unknown sleep state {segment.get('state')!r}; segment skipped", "state")
        return []

    samples = []
    for key in segment[ref]:
        timestamp = _parse_timestamp(key)
        if timestamp is None:
            warn(f"Invalid epoch timestamp {key!r}", "timestamp")
            continue

        metrics = {}
        for output, vendor_key in epoch_metric_fields:
            values = segment.get(vendor_key)
            value = values.get(key) if isinstance(values, dict) else None
            metrics[output] = _metric_value(value, output, warn)
        samples.append(EpochSample(night_id=night_id, timestamp=timestamp, state=state, **metrics))

    return samples


def _record_night_id(record: Dict[str, Any]):
    night_id = record.get("sleep_id", record.get("id"))
    if is_number(night_id) and float(night_id).is_integer():
        return int(night_id)
    return night_id


def flatten_epochs(epoch_records: Optional[Iterable[Dict[str, Any]]],
                   nights: Iterable[NightSummary]) -> FlattenResult:
    """
    Flatten raw epoch records for a set of normalized nights

    Args:
        epoch_records: Records shaped ``{"sleep_id": ..., "series": [segment, ...]}``
        nights: Normalized nights; records for other ids are skipped

    Returns:
        FlattenResult with samples in record/segment order and any warnings
    """
    known_ids = {night.id for night in nights}
    samples: List[EpochSample] = []
    warnings: List[ProcessingWarning] = []

    for record in epoch_records or []:
        night_id = _record_night_id(record)

        def warn(message, field=None):
            logger.warning(f"Night {night_id}: {message}")
            warnings.append(ProcessingWarning(stage=STAGE, message=message,
                                              night_id=night_id, field=field))

        if night_id not in known_ids:
            warn("Epoch data has no matching night summary; skipped")
            continue

        series = record.get("series") or []
        if not isinstance(series, list):
            warn("Epoch 'series' is not a list; skipped", "series")
            continue

        for segment in series:
            if not isinstance(segment, dict):
                warn(f"Epoch segment is not an object: {segment!r}; skipped", "series")
                continue
            samples.extend(flatten_segment(night_id, segment, warn))

    logger.info(f"Flattened {len(samples)} epoch samples for {len(known_ids)} nights")
    return FlattenResult(samples=samples, warnings=warnings)


def samples_from_rows(rows: List[Dict[str, Any]]) -> Tuple[List[EpochSample], List[ProcessingWarning]]:
    """
    Build samples from already-flat epoch table rows

    Args:
        rows: Rows using the epoch table columns (``id``, ``timestamp``, ``state``, metrics)

    Returns:
        Tuple of (samples, warnings); unusable rows are skipped with a warning
    """
    samples = []
    warnings = []

    for index, row in enumerate(rows):
        night_id = _record_night_id(row)
        timestamp = _parse_timestamp(row.get("timestamp"))
        try:
            state = SleepStage(int(row.get("state")))
        except (TypeError, ValueError):
            state = None

        def warn(message, field=None):
            logger.warning(f"Epoch row {index}: {message}")
            warnings.append(ProcessingWarning(stage=STAGE, message=message, night_id=night_id,
                                              row_index=index, field=field))

        if night_id is None or timestamp is None or state is None:
            warn(f"Unusable epoch row: {row!r}")
            continue

        metrics = {output: _metric_value(row.get(output), output, warn)
                   for output, _ in epoch_metric_fields}

        samples.append(EpochSample(night_id=night_id, timestamp=timestamp, state=state, **metrics))

    return samples, warnings


def samples_from_table(df: pd.DataFrame) -> Tuple[List[EpochSample], List[ProcessingWarning]]:
    """Build samples from an epoch table DataFrame (NaN cells become None)"""
    if df is None or df.empty:
        return [], []
    frame = df.astype(object).where(df.notna(), None)
    return samples_from_rows(frame.to_dict(orient='records'))
