"""
Normalizer manager that detects the input shape of a batch and hands it to
the matching normalizer.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from sleep_report.core.exceptions import UnrecognizedShapeError
from sleep_report.core.ingest.base_normalizer import BaseSummaryNormalizer
from sleep_report.core.ingest.canonical_tabular_normalizer import CanonicalTabularNormalizer
from sleep_report.core.ingest.prefixed_tabular_normalizer import PrefixedTabularNormalizer
from sleep_report.core.ingest.vendor_api_normalizer import VendorApiNormalizer
from sleep_report.core.models.data_models import InputShape
from sleep_report.core.models.output_models import NormalizationResult
from sleep_report.utils.field_catalog import FieldCatalog

logger = logging.getLogger(__name__)


def rows_from_input(data: Union[pd.DataFrame, List[Dict], Dict, None]) -> List[Dict[str, Any]]:
    """Convert a DataFrame, list of dicts or single dict to a list of row dicts"""
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    if isinstance(data, pd.DataFrame):
        frame = data.astype(object).where(data.notna(), None)
        return frame.to_dict(orient='records')
    if isinstance(data, list):
        return data
    raise ValueError(f"Unsupported data type: {type(data)}")


class NormalizerManager:
    """Manager class for summary normalizers"""

    def __init__(self, catalog: Optional[FieldCatalog] = None, prefix: str = "w_",
                 default_timezone: str = "UTC"):
        """Initialize the manager with one normalizer per supported shape, in probe order"""
        options = dict(catalog=catalog, prefix=prefix, default_timezone=default_timezone)

        # Probe order matters: tabular exports also carry startdate/enddate columns
        self.normalizers: "OrderedDict[InputShape, BaseSummaryNormalizer]" = OrderedDict([
            (InputShape.PREFIXED_TABULAR, PrefixedTabularNormalizer(**options)),
            (InputShape.CANONICAL_TABULAR, CanonicalTabularNormalizer(**options)),
            (InputShape.VENDOR_API, VendorApiNormalizer(**options)),
        ])

    def detect_shape(self, rows: List[Dict[str, Any]]) -> InputShape:
        """
        Decide the shape of a batch from the union of its keys

        Args:
            rows: Raw rows

        Returns:
            The detected InputShape

        Raises:
            UnrecognizedShapeError: when no shape matches
        """
        keys = set()
        for row in rows:
            keys.update(row.keys())

        for shape, normalizer in self.normalizers.items():
            if normalizer.matches(keys):
                return shape

        logger.error(f"Could not determine input shape from columns: {sorted(keys)}")
        raise UnrecognizedShapeError(
            "Could not determine summary input format. Expected a vendor API batch "
            "(startdate/enddate), a prefixed export (e.g. \"w_startdate\") or a canonical "
            "export (\"startdate_utc\")."
        )

    def normalize(self, data: Union[pd.DataFrame, List[Dict], Dict, None],
                  label: Optional[str] = None) -> NormalizationResult:
        """
        Normalize a batch of raw summary rows

        Args:
            data: Raw rows as DataFrame, list of dicts or single dict
            label: Optional label attached to every night

        Returns:
            NormalizationResult with nights and recoverable warnings
        """
        rows = rows_from_input(data)
        if not rows:
            logger.info("Empty summary batch; nothing to normalize")
            return NormalizationResult()

        shape = self.detect_shape(rows)
        normalizer = self.normalizers[shape]
        logger.info(f"Using {shape.value} normalizer for {len(rows)} rows")

        normalizer.check_columns(set().union(*(row.keys() for row in rows)))
        nights, warnings = normalizer.normalize_batch(rows, label=label)

        if warnings:
            logger.warning(f"Normalized {len(nights)} nights with {len(warnings)} warnings")

        return NormalizationResult(shape=shape, nights=nights, warnings=warnings)

    def get_supported_shapes(self) -> List[InputShape]:
        return list(self.normalizers.keys())
