"""
Module for calculating per-metric statistics over a set of nights.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from sleep_report.core.models.data_models import MetricAggregate, NightSummary
from sleep_report.core.models.output_models import DayTypeSplit
from sleep_report.utils.constants import ahi_severity_bands, snoring_severity_bands
from sleep_report.utils.field_catalog import DEFAULT_CATALOG, FieldCatalog
from sleep_report.utils.time_utils import is_missing, is_number, is_weekend

logger = logging.getLogger(__name__)

AHI_FIELD = "apnea_hypopnea_index"
SNORING_FIELD = "snoring"


def _lookup(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def extract_values(records: Iterable[Any], field: str, prefix: str = "w_") -> List[float]:
    """
    Collect the numeric values of a field

    Args:
        records: NightSummary models or plain row mappings
        field: Unprefixed field name
        prefix: Prefix of the alternate column name

    Returns:
        Numeric values in record order; missing and non-numeric values are dropped
    """
    values = []
    for record in records:
        value = _lookup(record, field)
        if is_missing(value) and prefix:
            value = _lookup(record, f"{prefix}{field}")
        if is_number(value):
            values.append(float(value))
    return values


def _classify(value: Optional[float], bands: Sequence[Tuple]) -> Tuple[Optional[str], Optional[str]]:
    if value is None:
        return None, None
    for upper, label, color in bands:
        if upper is None or value <= upper:
            return label, color
    return None, None


def classify_ahi(ahi: Optional[float]) -> Tuple[Optional[str], Optional[str]]:
    """
    Obstructive sleep apnea severity for an AHI value

    Args:
        ahi: Events per hour

    Returns:
        Tuple of (label, color); (None, None) for a missing value
    """
    return _classify(ahi, ahi_severity_bands)


def classify_snoring(minutes: Optional[float]) -> Tuple[Optional[str], Optional[str]]:
    """Snoring severity for a nightly snoring duration in minutes"""
    return _classify(minutes, snoring_severity_bands)


def severity_for(field: str, value: Optional[float]) -> Tuple[Optional[str], Optional[str]]:
    """Severity of a display-unit value for fields that define one"""
    if field == AHI_FIELD:
        return classify_ahi(value)
    if field in (SNORING_FIELD, "snoring_minutes"):
        return classify_snoring(value)
    return None, None


def aggregate_values(field: str, values: Sequence[float], display_name: Optional[str] = None,
                     unit: Optional[str] = None) -> MetricAggregate:
    """
    Mean, population standard deviation, min and max of already-converted values

    An empty set has mean and std 0 and no min/max.
    """
    values = list(values)
    display_name = display_name or field.replace('_', ' ').title()

    if not values:
        return MetricAggregate(field=field, display_name=display_name, unit=unit)

    array = np.asarray(values, dtype=float)
    mean = float(np.mean(array))
    severity, color = severity_for(field, mean)

    return MetricAggregate(
        field=field,
        display_name=display_name,
        unit=unit,
        count=len(values),
        mean=mean,
        std=float(np.std(array, ddof=0)),
        min=float(np.min(array)),
        max=float(np.max(array)),
        severity=severity,
        severity_color=color,
        values=values,
    )


def aggregate_metric(records: Iterable[Any], field: str, catalog: Optional[FieldCatalog] = None,
                     prefix: str = "w_") -> MetricAggregate:
    """
    Aggregate one field over a set of nights in its display unit

    Args:
        records: NightSummary models or row mappings
        field: Raw (vendor) or derived field name
        catalog: Field catalogue deciding the unit conversion
        prefix: Prefix of alternate column names

    Returns:
        MetricAggregate
    """
    catalog = catalog or DEFAULT_CATALOG
    metric = catalog.get(field)

    values = [catalog.convert(field, value) for value in extract_values(records, field, prefix)]
    display_name = metric.display_name if metric is not None else None
    unit = metric.display_unit if metric is not None else None

    return aggregate_values(field, values, display_name=display_name, unit=unit)


def split_by_day_type(nights: Iterable[NightSummary], apply_timezone: bool = True
                      ) -> Tuple[List[NightSummary], List[NightSummary]]:
    """
    Partition nights by the local day of week of their end instant

    Returns:
        Tuple of (weekday nights, weekend nights); nights without an end instant are left out
    """
    weekday, weekend = [], []
    for night in nights:
        if night.end_utc is None:
            continue
        if is_weekend(night.end_utc, night.timezone, apply_timezone):
            weekend.append(night)
        else:
            weekday.append(night)
    return weekday, weekend


def aggregate_by_day_type(nights: Iterable[NightSummary], field: str, catalog: Optional[FieldCatalog] = None,
                          apply_timezone: bool = True) -> DayTypeSplit:
    """Aggregate a field separately over weekday and weekend nights"""
    weekday, weekend = split_by_day_type(nights, apply_timezone)
    return DayTypeSplit(
        weekday=aggregate_metric(weekday, field, catalog),
        weekend=aggregate_metric(weekend, field, catalog),
    )
