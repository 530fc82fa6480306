"""
Analysis module for sleep data insights.

This module contains the wake-episode detector, the timeline layout
builder, per-metric statistics and nightly chart descriptions.
"""

from sleep_report.core.analysis.sleep_metrics import aggregate_metric, classify_ahi, classify_snoring
from sleep_report.core.analysis.sleep_visualization import build_night_charts, build_night_meta
from sleep_report.core.analysis.timing_layout import build_timing_layout
from sleep_report.core.analysis.wake_episodes import detect_all_wake_episodes, detect_wake_episodes

__all__ = [
    'aggregate_metric', 'classify_ahi', 'classify_snoring', 'build_night_charts', 'build_night_meta',
    'build_timing_layout', 'detect_all_wake_episodes', 'detect_wake_episodes',
]
