"""
Immutable lookup of summary fields and their unit conventions.

The catalogue is built once from the tables in ``constants`` and passed to
the normalizers and the statistics functions, which use it to decide how a
raw vendor value is converted for display (seconds to hours or minutes,
fraction to percent, or unchanged).
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from sleep_report.utils import constants


class UnitKind(str, Enum):
    DURATION_SECONDS = "duration_seconds"
    FRACTION = "fraction"
    PLAIN = "plain"


class MetricField(BaseModel):
    """One catalogued summary field"""
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    unit_kind: UnitKind = UnitKind.PLAIN
    display_unit: Optional[str] = None  # 'hours', 'minutes' or 'percent'

    @property
    def derived_name(self) -> Optional[str]:
        """Name of the converted field stored on a NightSummary, if any"""
        if self.display_unit is None:
            return None
        return f"{self.name}_{self.display_unit}"

    def convert(self, value: float) -> float:
        """Convert a raw value to its display unit"""
        if self.display_unit == 'hours':
            return value / 3600
        if self.display_unit == 'minutes':
            return value / 60
        if self.display_unit == 'percent':
            return value * 100
        return value


class FieldCatalog(BaseModel):
    """Ordered, read-only collection of MetricField entries"""
    model_config = ConfigDict(frozen=True)

    fields: Tuple[MetricField, ...]

    def get(self, name: str) -> Optional[MetricField]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def converted_fields(self) -> Tuple[MetricField, ...]:
        """Fields that carry a derived display-unit equivalent"""
        return tuple(field for field in self.fields if field.derived_name is not None)

    def convert(self, name: str, value: float) -> float:
        """Convert a raw value of the named field; unknown fields pass through"""
        field = self.get(name)
        return field.convert(value) if field is not None else value

    @classmethod
    def from_tables(cls,
                    data_fields=constants.summary_data_fields,
                    duration_fields=constants.duration_fields_in_seconds,
                    efficiency_fields=constants.fraction_fields,
                    display_names=None) -> 'FieldCatalog':
        """
        Build a catalogue from plain field tables

        Args:
            data_fields: Ordered numeric field names
            duration_fields: Fields reported in seconds
            efficiency_fields: Fields reported as a 0-1 fraction
            display_names: Mapping of field name to display name

        Returns:
            FieldCatalog
        """
        display_names = display_names if display_names is not None else constants.field_display_names
        entries = []

        for name in data_fields:
            display_name = display_names.get(name) or name.replace('_', ' ').title()

            if name in duration_fields:
                # Display names decide the unit: "(hours)" or anything else -> minutes
                unit = 'hours' if '(hours)' in display_name else 'minutes'
                entries.append(MetricField(name=name, display_name=display_name,
                                           unit_kind=UnitKind.DURATION_SECONDS, display_unit=unit))
            elif name in efficiency_fields:
                entries.append(MetricField(name=name, display_name=display_name,
                                           unit_kind=UnitKind.FRACTION, display_unit='percent'))
            else:
                entries.append(MetricField(name=name, display_name=display_name))

        return cls(fields=tuple(entries))


DEFAULT_CATALOG = FieldCatalog.from_tables()
