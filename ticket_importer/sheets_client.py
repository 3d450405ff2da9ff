from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, List

import pandas as pd
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from .config import SheetsConfig
from .errors import ConfigError
from .fields import Cell

Row = List[Cell]

SPREADSHEET_EPOCH = datetime(1899, 12, 30)

# pandas reader engine per workbook extension
ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
    ".xlsb": "pyxlsb",
    ".ods": "odf",
}

def _to_serial(value: date) -> float:
    """Spreadsheet serial number (days since 1899-12-30) for a date/time cell."""
    # plain datetime arithmetic, pandas Timestamps stop at year 2262
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return (value.replace(tzinfo=None) - SPREADSHEET_EPOCH) / timedelta(days=1)

def normalize_cell(value: Any) -> Cell:
    if isinstance(value, (str, bool)):
        return value
    if value is None or pd.isna(value):
        return None
    if isinstance(value, (datetime, date)):
        return _to_serial(value)
    if hasattr(value, "item"):  # numpy scalar
        return value.item()
    return value

def read_workbook_rows(path: str, worksheet: str) -> List[Row]:
    """Read every row of a worksheet in an .xlsx/.xlsm/.xls/.xlsb/.ods file, as raw cells."""
    ext = Path(path).suffix.lower()
    if ext not in ENGINES:
        raise ConfigError(f"Unsupported file type {ext or path!r}, expected one of: {', '.join(ENGINES)}")
    try:
        df = pd.read_excel(path, sheet_name=worksheet, header=None, dtype=object, engine=ENGINES[ext])
    except FileNotFoundError:
        raise ConfigError(f"Cannot open file: {path}") from None
    except ImportError as e:
        raise ConfigError(f"Cannot read {ext} files, the {ENGINES[ext]} package is missing: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Could not find worksheet {worksheet!r} in {path}: {e}") from e
    return [[normalize_cell(v) for v in line] for line in df.itertuples(index=False, name=None)]

def fetch_sheet_rows(cfg: SheetsConfig, worksheet: str) -> List[Row]:
    """Fetch a Google Sheets worksheet as raw cells, dates as serial numbers."""
    creds = Credentials.from_service_account_file(
        cfg.service_account_json,
        scopes=["https://www.googleapis.com/auth/spreadsheets.readonly"],
    )
    service = build("sheets", "v4", credentials=creds)

    resp = service.spreadsheets().values().get(
        spreadsheetId=cfg.spreadsheet_id,
        range=worksheet,
        valueRenderOption="UNFORMATTED_VALUE",
        dateTimeRenderOption="SERIAL_NUMBER",
    ).execute()

    # the API leaves blank cells as "" and trims trailing blanks
    return [[None if v == "" else v for v in line] for line in resp.get("values", [])]
