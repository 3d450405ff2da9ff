from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd
import requests

from .batches import make_batches
from .config import WorksheetConfig
from .fields import RemoteFieldDefinition
from .mapping import MappingConfig
from .sheets_client import Row
from .ticket import RowResult, Ticket, build_row
from .zendesk_client import ZendeskClient

@dataclass
class ImportReport:
    results: List[RowResult] = field(default_factory=list)
    batches_sent: int = 0
    logs: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def tickets(self) -> List[Ticket]:
        return [r.ticket for r in self.results if r.ok]

    @property
    def errors(self) -> List[RowResult]:
        return [r for r in self.results if not r.ok]

def build_rows(
    rows: Sequence[Row],
    worksheet: WorksheetConfig,
    mapping: MappingConfig,
    fields: Sequence[RemoteFieldDefinition],
) -> List[RowResult]:
    """Build every data row, starting at the worksheet's top row. Bad rows are reported, not raised."""
    results = []
    for i, row in enumerate(rows[worksheet.top_row - 1:], start=worksheet.top_row):
        result = build_row(i, row, mapping, fields, worksheet.timezone)
        if not result.ok:
            print(f"Error processing line {i}, cause: {result.error}", file=sys.stderr)
        results.append(result)
    return results

class Importer:
    def __init__(
        self,
        rows: Sequence[Row],
        worksheet: WorksheetConfig,
        mapping: MappingConfig,
        client: ZendeskClient,
    ):
        self.rows = rows
        self.worksheet = worksheet
        self.mapping = mapping
        self.client = client
        self.report = ImportReport()

    def run(self, dry_run: bool = False) -> ImportReport:
        """
        Fetch field definitions, build tickets and send them in batches, one request at a time.

        A failed request stops the run; batches already sent stay created.
        """
        fields = self.client.get_ticket_fields()
        self.report = report = ImportReport(results=build_rows(self.rows, self.worksheet, self.mapping, fields))

        for r in report.errors:
            report.logs.append({"sheet_row": r.sheet_row, "status": "error", "reason": str(r.error)})

        batches = list(make_batches([r for r in report.results if r.ok]))
        for n, batch in enumerate(batches, start=1):
            payload = [r.ticket.to_payload() for r in batch]
            if dry_run:
                status = "dry_run"
                print(f"Batch {n}/{len(batches)}: would create {len(payload)} tickets")
            else:
                try:
                    resp = self.client.create_many(payload)
                except requests.RequestException as e:
                    self._log_not_sent(batches, n, f"run aborted at batch {n}: {e}")
                    raise
                status = "submitted"
                job = resp.get("job_status", {})
                print(f"Batch {n}/{len(batches)}: sent {len(payload)} tickets, job {job.get('id', '?')} {job.get('status', '')}".rstrip())
                report.batches_sent += 1
            for r in batch:
                report.logs.append({"sheet_row": r.sheet_row, "status": status, "reason": "", "batch": n})

        return report

    def _log_not_sent(self, batches, first: int, reason: str) -> None:
        for n, batch in enumerate(batches[first - 1:], start=first):
            for r in batch:
                self.report.logs.append({"sheet_row": r.sheet_row, "status": "not_sent", "reason": reason, "batch": n})

def write_log(logs: List[Dict[str, Any]], log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(logs, columns=["sheet_row", "status", "reason", "batch"])
    df.sort_values("sheet_row").to_csv(log_path, index=False)
