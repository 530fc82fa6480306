"""
Date parsing and timezone helpers shared by the pipeline stages.
"""

import logging
import math
import numbers
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from sleep_report.utils.constants import MINUTES_PER_DAY, NOON_MINUTES

logger = logging.getLogger(__name__)

DISPLAY_DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'
DISPLAY_MINUTE_FORMAT = '%Y-%m-%d %H:%M'
DISPLAY_DATE_FORMAT = '%Y-%m-%d'
ROW_LABEL_FORMAT = '%d %b'
BASIC_DATE_FORMAT = '%Y%m%d'


def is_number(value: Any) -> bool:
    """True for real numbers that are not bools and not NaN"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def is_missing(value: Any) -> bool:
    """None, NaN or an empty string"""
    if value is None:
        return True
    if isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parse an epoch-seconds number or an ISO-like date string to a UTC datetime

    Args:
        value: Epoch seconds, date string, datetime or None

    Returns:
        Timezone-aware UTC datetime, or None when the value cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if is_number(value):
        return _from_epoch_seconds(float(value))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None

        # Eight digits are a basic-format date (YYYYMMDD), not epoch seconds
        if len(text) == 8 and text.isdigit():
            try:
                return datetime.strptime(text, BASIC_DATE_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError:
                pass

        # Other digit-only strings are epoch seconds that lost their type in a CSV
        try:
            return _from_epoch_seconds(float(text))
        except ValueError:
            pass

        parsed = pd.to_datetime(text, utc=True, errors='coerce')
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime()

    return None


def _from_epoch_seconds(seconds: float) -> Optional[datetime]:
    if math.isnan(seconds) or math.isinf(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def epoch_seconds(instant: Optional[datetime]) -> Optional[float]:
    """Epoch seconds for an instant, as an int when whole"""
    if instant is None:
        return None
    seconds = instant.timestamp()
    return int(seconds) if seconds.is_integer() else seconds


@lru_cache(maxsize=None)
def _zone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Invalid timezone \"{name}\", falling back to UTC")
        return timezone.utc


def resolve_timezone(tz_name: Optional[str], apply_timezone: bool = True):
    """Zone used for local display: the night's zone, or UTC when disabled or unknown"""
    if not apply_timezone or not tz_name:
        return timezone.utc
    return _zone(tz_name)


def is_known_timezone(tz_name: Optional[str]) -> bool:
    if not tz_name:
        return False
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def to_local(instant: datetime, tz_name: Optional[str], apply_timezone: bool = True) -> datetime:
    return instant.astimezone(resolve_timezone(tz_name, apply_timezone))


def format_local(instant: Optional[datetime], tz_name: Optional[str], fmt: str = DISPLAY_DATETIME_FORMAT,
                 apply_timezone: bool = True) -> Optional[str]:
    """Format an instant in local time, or None for a missing instant"""
    if instant is None:
        return None
    return to_local(instant, tz_name, apply_timezone).strftime(fmt)


def minutes_from_noon(instant: Optional[datetime], tz_name: Optional[str],
                      apply_timezone: bool = True) -> Optional[int]:
    """
    Position of an instant on the local noon-based axis

    Local noon maps to 0 and local midnight to 720; the result is always
    in [0, 1440).
    """
    if instant is None:
        return None
    local = to_local(instant, tz_name, apply_timezone)
    clock_minutes = local.hour * 60 + local.minute
    return ((clock_minutes - NOON_MINUTES) + MINUTES_PER_DAY) % MINUTES_PER_DAY


def noon_minutes_to_clock(minutes: float) -> str:
    """Convert a (possibly fractional, possibly >= 1440) noon-axis value to HH:MM"""
    total = int(round(minutes + NOON_MINUTES)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def is_weekend(instant: datetime, tz_name: Optional[str], apply_timezone: bool = True) -> bool:
    """Saturday or Sunday in the local zone"""
    return to_local(instant, tz_name, apply_timezone).weekday() >= 5
