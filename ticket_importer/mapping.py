from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import pandas as pd

from .columns import resolve_column
from .errors import ConfigError

SYSTEM_FIELDS = ("comment", "subject", "status", "type", "assignee", "priority")

@dataclass(frozen=True)
class MappingConfig:
    """Maps ticket fields -> zero-based sheet column indexes."""
    comment: int
    subject: Optional[int] = None
    status: Optional[int] = None
    type: Optional[int] = None
    assignee: Optional[int] = None
    priority: Optional[int] = None
    # (remote field title, column index), in the order they were declared
    custom_fields: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)

def _column(label: str) -> Optional[int]:
    label = label.strip()
    if not label:
        return None
    return resolve_column(label)

def mapping_from_entries(entries) -> MappingConfig:
    """Build a MappingConfig from (kind, field, column label) triples."""
    system = {}
    custom = []
    for kind, name, label in entries:
        kind = kind.strip().lower()
        if kind == "system":
            name = name.strip().lower()
            if name not in SYSTEM_FIELDS:
                raise ConfigError(f"Unknown system field {name!r}, expected one of: {', '.join(SYSTEM_FIELDS)}")
            index = _column(label)
            if index is not None:
                system[name] = index
        elif kind == "custom":
            index = _column(label)
            if index is not None:
                custom.append((name, index))
        else:
            raise ConfigError(f"Unknown mapping kind {kind!r}, expected 'system' or 'custom'")

    if "comment" not in system:
        raise ConfigError("The comment field must be mapped to a column")
    return MappingConfig(custom_fields=tuple(custom), **system)

def load_mapping(path: str) -> MappingConfig:
    """Read a CSV mapping file with columns kind,field,column."""
    try:
        mp = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ConfigError(f"Could not read mapping file {path}: {e}") from e

    missing = {"kind", "field", "column"} - set(mp.columns)
    if missing:
        raise ConfigError(f"Mapping file {path} is missing columns: {', '.join(sorted(missing))}")
    return mapping_from_entries(zip(mp["kind"], mp["field"], mp["column"]))
