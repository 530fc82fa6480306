"""
Normalizer for tabular exports that already use the canonical
``startdate_utc`` / ``enddate_utc`` columns.
"""

from typing import Any, Dict, Iterable, Tuple

from sleep_report.core.ingest.base_normalizer import BaseSummaryNormalizer
from sleep_report.core.models.data_models import InputShape


class CanonicalTabularNormalizer(BaseSummaryNormalizer):
    """Normalize canonical tabular rows; derived columns are recomputed, not trusted"""

    shape = InputShape.CANONICAL_TABULAR

    def matches(self, keys: Iterable[str]) -> bool:
        return "startdate_utc" in set(keys)

    def _flatten_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return dict(row)

    def _date_values(self, flat: Dict[str, Any]) -> Tuple[Any, Any]:
        return flat.get("startdate_utc"), flat.get("enddate_utc")
