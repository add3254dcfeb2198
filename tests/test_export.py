"""Tests for export helpers."""

from __future__ import annotations

import csv
import io
import json

from conftest import make_record

from kitpilot.models import OverallStatus
from kitpilot.reporting.data_export import export_csv, export_json, export_to_file


def test_export_json_full_records():
    data = json.loads(export_json([make_record("a")]))
    assert data[0]["id"] == "a"
    assert data[0]["assets"]["resumeHtml"] == "<h1>Jane</h1>"


def test_export_csv_summary():
    records = [
        make_record("a", company="Acme, Inc.", labels=("Phone Screen",), current=1),
        make_record("b", status=OverallStatus.GHOSTED),
    ]
    rows = list(csv.DictReader(io.StringIO(export_csv(records))))
    assert rows[0]["company"] == "Acme, Inc."
    assert rows[0]["badge"] == "Phone Screen"
    assert rows[0]["stages"] == "Applied > Phone Screen"
    assert rows[1]["badge"] == "No Response"
    assert rows[1]["status"] == "ghosted"


def test_export_csv_empty():
    assert export_csv([]) == ""


def test_export_to_file(tmp_path):
    dest = export_to_file([make_record("a")], tmp_path / "out", fmt="csv")
    assert dest.name == "applications_export.csv"
    assert "Acme" in dest.read_text()
