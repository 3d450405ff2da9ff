from __future__ import annotations

from string import ascii_letters

from .errors import InvalidColumnLabel

def resolve_column(label: str) -> int:
    """Convert a spreadsheet column label ("A", "AB", ...) to a zero-based index."""
    if not label or not all(ch in ascii_letters for ch in label):
        raise InvalidColumnLabel(label)

    index = 0
    for ch in label.upper():
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1  # A -> 0
