"""
Summary ingestion: shape detection and normalization of raw night rows.
"""

from sleep_report.core.ingest.normalizer_manager import NormalizerManager, rows_from_input

__all__ = ['NormalizerManager', 'rows_from_input']
