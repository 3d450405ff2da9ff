from __future__ import annotations

import numbers
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .errors import CoercionError, UnknownTimezone

Cell = Union[str, int, float, bool, None]
FieldValue = Union[str, datetime, date, bool, List[str]]

# Spreadsheet serial day 25569 is 1970-01-01.
SERIAL_UNIX_EPOCH = 25569
SECONDS_PER_DAY = 86400

TIMEZONES: Dict[str, str] = {
    "Acre": "America/Rio_Branco",
    "DeNoronha": "America/Noronha",
    "East": "America/Sao_Paulo",
    "West": "America/Manaus",
}

def resolve_timezone(name: str) -> str:
    try:
        return TIMEZONES[name]
    except KeyError:
        raise UnknownTimezone(name, TIMEZONES) from None

class FieldType(str, Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    CHECKBOX = "checkbox"
    TEXT = "text"
    TAGGER = "tagger"

@dataclass(frozen=True)
class FieldOption:
    name: str
    value: Any

@dataclass(frozen=True)
class RemoteFieldDefinition:
    """A ticket field as described by GET /ticket_fields."""
    id: int
    title: str
    type: str
    options: Tuple[FieldOption, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RemoteFieldDefinition":
        options = tuple(
            FieldOption(name=o["name"], value=o["value"])
            for o in data.get("custom_field_options") or []
        )
        return cls(id=int(data["id"]), title=data["title"], type=data["type"], options=options)

    @property
    def field_type(self) -> Optional[FieldType]:
        """The declared type, or None when the API sent a tag we cannot coerce."""
        try:
            return FieldType(self.type)
        except ValueError:
            return None

@dataclass(frozen=True)
class CustomFieldValue:
    id: int
    value: FieldValue

    def to_payload(self) -> Dict[str, Any]:
        value = self.value
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        return {"id": self.id, "value": value}

def _is_number(cell: Cell) -> bool:
    return isinstance(cell, numbers.Real) and not isinstance(cell, bool)

def format_number(value: float) -> str:
    """Render a number the way the API expects numeric custom fields: 3.0 -> "3", 1e-07 -> "0.0000001"."""
    return np.format_float_positional(float(value), trim="-")

def serial_to_date(serial: float, timezone: str) -> date:
    """Convert a spreadsheet serial date, read as wall-clock time in `timezone`, to a UTC date."""
    zone = resolve_timezone(timezone)
    try:
        seconds = round((float(serial) - SERIAL_UNIX_EPOCH) * SECONDS_PER_DAY)
        local = pd.Timestamp(seconds, unit="s").tz_localize(
            zone, ambiguous=False, nonexistent="shift_forward"
        )
        return local.tz_convert("UTC").date()
    except (OverflowError, ValueError) as e:
        # OutOfBoundsDatetime is a ValueError
        raise CoercionError(f"Date serial {serial!r} is out of range: {e}") from e

def _coerce_number(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> FieldValue:
    if not _is_number(cell):
        raise CoercionError(f"Could not parse {cell!r} as {fdef.type} for field {fdef.title!r}")
    return format_number(cell)

def _coerce_checkbox(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> FieldValue:
    if not isinstance(cell, bool):
        raise CoercionError(f"Could not parse {cell!r} as boolean for field {fdef.title!r}")
    return cell

def _coerce_text(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> FieldValue:
    if not isinstance(cell, str):
        raise CoercionError(f"Could not parse {cell!r} as string for field {fdef.title!r}")
    return cell

def _coerce_date(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> FieldValue:
    if not _is_number(cell):
        raise CoercionError(f"Could not parse {cell!r} as a date for field {fdef.title!r}")
    return serial_to_date(cell, timezone)

def _coerce_tagger(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> FieldValue:
    if isinstance(cell, str):
        for option in fdef.options:
            if option.name == cell:
                return option.value
    raise CoercionError(
        f"Could not parse {cell!r} as a dropdown option for field {fdef.title!r}, "
        f"expected one of: {', '.join(o.name for o in fdef.options)}"
    )

_COERCERS = {
    FieldType.INTEGER: _coerce_number,
    FieldType.DECIMAL: _coerce_number,
    FieldType.DATE: _coerce_date,
    FieldType.CHECKBOX: _coerce_checkbox,
    FieldType.TEXT: _coerce_text,
    FieldType.TAGGER: _coerce_tagger,
}

def coerce(cell: Cell, fdef: RemoteFieldDefinition, timezone: str) -> CustomFieldValue:
    """
    Turn one cell into the value for a remote custom field.

    The remote field's declared type decides the conversion, never the cell's own type.
    Raises CoercionError when the cell does not fit, or the type is one we do not handle.
    """
    ftype = fdef.field_type
    if ftype is None:
        raise CoercionError(f"Unsupported field type {fdef.type!r} for field {fdef.title!r}")
    return CustomFieldValue(id=fdef.id, value=_COERCERS[ftype](cell, fdef, timezone))
