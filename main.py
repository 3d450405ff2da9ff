from __future__ import annotations

import argparse
import sys

import requests
from googleapiclient.errors import HttpError

from ticket_importer.config import load_settings
from ticket_importer.errors import ConfigError
from ticket_importer.importer import Importer, write_log
from ticket_importer.mapping import load_mapping
from ticket_importer.sheets_client import fetch_sheet_rows, read_workbook_rows
from ticket_importer.zendesk_client import ZendeskClient

def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create Zendesk tickets from spreadsheet rows")
    p.add_argument("file", nargs="?", help="Input .xlsx, .xlsm, .xls, .xlsb or .ods file. Omit to read from Google Sheets")
    p.add_argument("--dry-run", action="store_true", help="Build tickets and show the batches without sending")
    p.add_argument("--sync", action="store_true", help="Create the tickets in Zendesk")
    p.add_argument("--env", default=".env", help="Settings file with Zendesk credentials and worksheet options")
    p.add_argument("--mapping", default="mapping.csv", help="CSV mapping file: kind,field,column")
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.dry_run and not args.sync:
        print("Choose one: --dry-run or --sync")
        return 2

    try:
        settings = load_settings(args.env)
        mapping = load_mapping(args.mapping)
        if args.file:
            rows = read_workbook_rows(args.file, settings.worksheet.name)
        elif settings.sheets is not None:
            rows = fetch_sheet_rows(settings.sheets, settings.worksheet.name)
        else:
            raise ConfigError("No input file given and GOOGLE_SHEETS_SPREADSHEET_ID is not set")
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except HttpError as e:
        print(f"Google Sheets request failed: {e}", file=sys.stderr)
        return 1

    if len(rows) < settings.worksheet.top_row:
        print("No rows found.")
        return 0

    importer = Importer(rows, settings.worksheet, mapping, ZendeskClient(settings.zendesk))
    try:
        report = importer.run(dry_run=args.dry_run)
    except requests.RequestException as e:
        print(f"Zendesk request failed: {e}", file=sys.stderr)
        return 1
    finally:
        write_log(importer.report.logs, settings.log_path)

    print(f"Done. {len(report.tickets)} tickets built, {len(report.errors)} rows skipped. Log saved to: {settings.log_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
