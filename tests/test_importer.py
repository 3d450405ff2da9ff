"""Tests for importer module."""

import pandas as pd
import pytest
import requests

from conftest import FakeResponse
from ticket_importer.config import WorksheetConfig, ZendeskConfig
from ticket_importer.importer import Importer, build_rows, write_log
from ticket_importer.mapping import MappingConfig
from ticket_importer.zendesk_client import ZendeskClient

FIELDS_RESPONSE = {"ticket_fields": [{"id": 9, "title": "Order number", "type": "integer"}]}
WORKSHEET = WorksheetConfig(name="Tickets", top_row=2, timezone="East")
MAPPING = MappingConfig(comment=0, priority=1, custom_fields=(("Order number", 2),))


def make_client(fake_session, *responses):
    client = ZendeskClient(ZendeskConfig("acme", "admin@acme.com", "secret"))
    client.session = fake_session(*responses)
    return client


def test_build_rows_skips_header_and_reports_bad_rows(capsys):
    rows = [
        ["Comment", "Priority", "Order"],
        ["First", "alta", 1.0],
        [42.0, "baixa", 2.0],
        ["Third", None, 3.0],
    ]
    results = build_rows(rows, WORKSHEET, MAPPING, [])
    assert [r.sheet_row for r in results] == [2, 3, 4]
    assert [r.ok for r in results] == [True, False, True]
    assert "Error processing line 3" in capsys.readouterr().err


def test_top_row_one_reads_every_row():
    results = build_rows([["a"], ["b"]], WorksheetConfig("Tickets", top_row=1), MappingConfig(comment=0), [])
    assert [r.ticket.comment for r in results] == ["a", "b"]


def test_run_sends_batches_in_order(fake_session):
    rows = [["header"]] + [[f"ticket {i}", "normal", float(i)] for i in range(250)]
    client = make_client(
        fake_session,
        FakeResponse(payload=FIELDS_RESPONSE),
        FakeResponse(payload={"job_status": {"id": "1"}}),
        FakeResponse(payload={"job_status": {"id": "2"}}),
        FakeResponse(payload={"job_status": {"id": "3"}}),
    )
    report = Importer(rows, WORKSHEET, MAPPING, client).run()

    posts = [c for c in client.session.calls if c[0] == "POST"]
    sizes = [len(kwargs["json"]["tickets"]) for _, _, kwargs in posts]
    assert sizes == [100, 100, 50]
    bodies = [t["comment"]["body"] for _, _, kw in posts for t in kw["json"]["tickets"]]
    assert bodies == [f"ticket {i}" for i in range(250)]
    assert posts[0][2]["json"]["tickets"][5]["custom_fields"] == [{"id": 9, "value": "5"}]
    assert report.batches_sent == 3
    assert len(report.tickets) == 250


def test_bad_row_does_not_stop_run(fake_session):
    rows = [["header"], ["good", "high", 1.0], ["bad", "medium", 2.0], ["also good", None, 3.0]]
    client = make_client(fake_session, FakeResponse(payload=FIELDS_RESPONSE), FakeResponse(payload={}))
    report = Importer(rows, WORKSHEET, MAPPING, client).run()

    assert [r.sheet_row for r in report.errors] == [3]
    tickets = client.session.calls[1][2]["json"]["tickets"]
    assert [t["comment"]["body"] for t in tickets] == ["good", "also good"]
    assert {"sheet_row": 3, "status": "error", "reason": str(report.errors[0].error)} in report.logs


def test_dry_run_sends_nothing(fake_session):
    client = make_client(fake_session, FakeResponse(payload=FIELDS_RESPONSE))
    report = Importer([["h"], ["x", None, 1.0]], WORKSHEET, MAPPING, client).run(dry_run=True)
    assert [c[0] for c in client.session.calls] == ["GET"]
    assert report.batches_sent == 0
    assert report.logs == [{"sheet_row": 2, "status": "dry_run", "reason": "", "batch": 1}]


def test_failed_batch_is_fatal(fake_session):
    rows = [["header"]] + [[f"t{i}", None, 1.0] for i in range(150)]
    client = make_client(
        fake_session,
        FakeResponse(payload=FIELDS_RESPONSE),
        FakeResponse(payload={}),
        FakeResponse(status_code=422, payload={"error": "RecordInvalid"}),
    )
    importer = Importer(rows, WORKSHEET, MAPPING, client)
    with pytest.raises(requests.HTTPError):
        importer.run()
    assert importer.report.batches_sent == 1
    assert len(client.session.calls) == 3

    logs = pd.DataFrame(importer.report.logs)
    assert (logs["status"] == "submitted").sum() == 100
    not_sent = logs[logs["status"] == "not_sent"]
    assert list(not_sent["sheet_row"]) == list(range(102, 152))
    assert all("run aborted at batch 2" in reason for reason in not_sent["reason"])


def test_failed_field_fetch_is_fatal(fake_session):
    client = make_client(fake_session, FakeResponse(status_code=401))
    with pytest.raises(requests.HTTPError):
        Importer([["h"], ["x"]], WORKSHEET, MAPPING, client).run()


def test_write_log(tmp_path):
    path = tmp_path / "out" / "log.csv"
    write_log(
        [
            {"sheet_row": 3, "status": "error", "reason": "bad"},
            {"sheet_row": 2, "status": "submitted", "reason": "", "batch": 1},
        ],
        path,
    )
    df = pd.read_csv(path)
    assert list(df.columns) == ["sheet_row", "status", "reason", "batch"]
    assert list(df["sheet_row"]) == [2, 3]
