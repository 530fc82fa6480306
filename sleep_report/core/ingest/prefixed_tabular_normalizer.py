"""
Normalizer for tabular exports whose columns carry a fixed prefix
(e.g. ``w_startdate``) alongside unprefixed duplicates.
"""

from typing import Any, Dict, Iterable, Tuple

from sleep_report.core.ingest.base_normalizer import BaseSummaryNormalizer
from sleep_report.core.models.data_models import InputShape
from sleep_report.utils.time_utils import is_missing


class PrefixedTabularNormalizer(BaseSummaryNormalizer):
    """Normalize prefixed tabular rows"""

    shape = InputShape.PREFIXED_TABULAR

    def matches(self, keys: Iterable[str]) -> bool:
        return f"{self.prefix}startdate" in set(keys)

    def required_columns(self) -> Tuple[str, ...]:
        return ("id", f"{self.prefix}id")

    def _flatten_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Strip the prefix from column names

        An unprefixed column wins over its prefixed twin unless it is empty.
        """
        flat: Dict[str, Any] = {}

        for key, value in row.items():
            if key.startswith(self.prefix):
                flat.setdefault(key[len(self.prefix):], value)

        for key, value in row.items():
            if key.startswith(self.prefix):
                continue
            if not is_missing(value) or key not in flat:
                flat[key] = value

        return flat
