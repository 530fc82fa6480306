"""
Normalizer for sleep summary rows as returned by the vendor API.
"""

import logging
from typing import Any, Dict, Iterable

from sleep_report.core.ingest.base_normalizer import BaseSummaryNormalizer
from sleep_report.core.models.data_models import InputShape

logger = logging.getLogger(__name__)


class VendorApiNormalizer(BaseSummaryNormalizer):
    """Normalize vendor API rows, whose auxiliary metrics sit in a nested 'data' object"""

    shape = InputShape.VENDOR_API

    def matches(self, keys: Iterable[str]) -> bool:
        keys = set(keys)
        return "startdate" in keys and "enddate" in keys

    def _flatten_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge the nested 'data' object into the top level

        Args:
            row: Raw API row

        Returns:
            Flat dictionary; nested values win over top-level duplicates
        """
        flat = {key: value for key, value in row.items() if key != "data"}
        nested = row.get("data")

        if isinstance(nested, dict):
            flat.update(nested)
        elif nested is not None:
            logger.warning(f"Ignoring non-object 'data' field on night {row.get('id')}")

        return flat
