"""
Working-set filters applied to normalized nights before analysis.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional, Union

import pandas as pd

from sleep_report.core.models.data_models import EpochSample, NightSummary

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.to_datetime(value).date()


def filter_by_date_range(nights: Iterable[NightSummary], start_date: Optional[DateLike] = None,
                         end_date: Optional[DateLike] = None) -> List[NightSummary]:
    """
    Keep nights whose end instant falls within whole UTC days

    Args:
        nights: Normalized nights
        start_date: First day included (00:00:00 UTC); open when None
        end_date: Last day included (through 23:59:59.999999 UTC); open when None

    Returns:
        Filtered nights in input order; nights with invalid dates are dropped
    """
    lower = datetime.combine(_as_date(start_date), time.min, tzinfo=timezone.utc) if start_date else None
    upper = datetime.combine(_as_date(end_date), time.max, tzinfo=timezone.utc) if end_date else None

    kept = []
    for night in nights:
        if not night.has_valid_dates:
            continue
        if lower is not None and night.end_utc < lower:
            continue
        if upper is not None and night.end_utc > upper:
            continue
        kept.append(night)

    logger.info(f"Date filter kept {len(kept)} nights")
    return kept


def filter_naps(nights: Iterable[NightSummary], min_hours: float) -> List[NightSummary]:
    """Drop sessions whose total sleep time is shorter than min_hours (or unknown)"""
    threshold = min_hours * 3600
    kept = [night for night in nights
            if night.total_sleep_time is not None and night.total_sleep_time >= threshold]
    logger.info(f"Nap filter ({min_hours}h) kept {len(kept)} nights")
    return kept


def filter_epochs_to_nights(samples: Iterable[EpochSample], nights: Iterable[NightSummary]) -> List[EpochSample]:
    night_ids = {night.id for night in nights}
    return [sample for sample in samples if sample.night_id in night_ids]
