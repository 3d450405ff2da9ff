from __future__ import annotations

class ImporterError(Exception):
    """Base class for errors raised by the importer."""

class ConfigError(ImporterError):
    """Settings or mapping are unusable. Raised before any row is read."""

class InvalidColumnLabel(ConfigError):
    def __init__(self, label: str):
        super().__init__(f"Invalid column {label!r}: spreadsheet columns must be ASCII letters only")
        self.label = label

class UnknownTimezone(ConfigError):
    def __init__(self, name: str, known):
        super().__init__(f"Unknown timezone {name!r}, expected one of: {', '.join(known)}")
        self.name = name

class RowError(ImporterError):
    """A single row could not be turned into a ticket."""

class CoercionError(RowError):
    pass
