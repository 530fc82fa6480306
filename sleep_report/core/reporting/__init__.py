"""
Reporting module for sleep insights.

This module assembles the statistics shown in a report: summary figures,
the metrics table, weekday/weekend comparisons, sleep ritual and vitals.
"""

from sleep_report.core.reporting.report_generator import build_statistics, format_hours_minutes

__all__ = ['build_statistics', 'format_hours_minutes']
