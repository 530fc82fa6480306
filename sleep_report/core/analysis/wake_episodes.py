"""
Detection of sustained awake intervals within a night.
"""

import logging
from datetime import datetime, timezone
from itertools import groupby
from typing import Dict, Iterable, List

from sleep_report.core.models.data_models import EpochSample, NightSummary, SleepStage, WakeEpisode

logger = logging.getLogger(__name__)

DEFAULT_MIN_DURATION_SECONDS = 600


def _instant(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def detect_wake_episodes(samples: Iterable[EpochSample], night: NightSummary,
                         min_duration_seconds: float = DEFAULT_MIN_DURATION_SECONDS) -> List[WakeEpisode]:
    """
    Find awake runs of at least min_duration_seconds within one night

    A run ends at its last awake sample, or at the night's end when the
    awake samples continue to the end of the recording. Both ends are
    clipped to the night interval.

    Args:
        samples: The night's epoch samples, in any order
        night: The night the samples belong to
        min_duration_seconds: Shortest episode kept (inclusive)

    Returns:
        Episodes in chronological order
    """
    if not night.has_valid_dates:
        logger.debug(f"Night {night.id}: invalid interval, no wake episodes")
        return []

    ordered = sorted(samples, key=lambda sample: sample.timestamp)
    if not ordered:
        return []

    last_timestamp = ordered[-1].timestamp
    episodes = []

    for is_awake, run in groupby(ordered, key=lambda sample: sample.state == SleepStage.AWAKE):
        if not is_awake:
            continue
        run = list(run)

        start = _instant(run[0].timestamp)
        end = night.end_utc if run[-1].timestamp == last_timestamp else _instant(run[-1].timestamp)

        start = max(start, night.start_utc)
        end = min(end, night.end_utc)
        if end < start:
            continue

        duration = (end - start).total_seconds()
        if duration >= min_duration_seconds:
            episodes.append(WakeEpisode(night_id=night.id, start=start, end=end, duration_seconds=duration))

    return episodes


def detect_all_wake_episodes(samples: Iterable[EpochSample], nights: Iterable[NightSummary],
                             min_duration_seconds: float = DEFAULT_MIN_DURATION_SECONDS) -> List[WakeEpisode]:
    """Run detection per night; nights without samples contribute nothing"""
    by_night: Dict = {}
    for sample in samples:
        by_night.setdefault(sample.night_id, []).append(sample)

    episodes = []
    for night in nights:
        episodes.extend(detect_wake_episodes(by_night.get(night.id, []), night, min_duration_seconds))

    logger.info(f"Detected {len(episodes)} wake episodes")
    return episodes
