"""Tests for the JSON history store, legacy import and profile storage."""

from __future__ import annotations

import base64
import json

import pytest
from conftest import make_record

from kitpilot.exceptions import PersistenceError
from kitpilot.history.store import JsonHistoryStore, ProfileStore, import_legacy_csv
from kitpilot.history.tracker import PipelineTracker
from kitpilot.models import OverallStatus


def test_save_update_delete(store):
    assert store.load_all() == []
    store.save(make_record("a"))
    store.save(make_record("b", company="Beta"))

    rec = make_record("a", company="Acme Renamed")
    store.update(rec)
    rows = store.load_all()
    assert [r["id"] for r in rows] == ["a", "b"]
    assert rows[0]["company"] == "Acme Renamed"

    store.delete("a")
    assert [r["id"] for r in store.load_all()] == ["b"]


def test_update_and_delete_unknown_are_noops(store):
    store.save(make_record("a"))
    store.update(make_record("zzz", company="Ghost"))
    store.delete("zzz")
    assert [r["id"] for r in store.load_all()] == ["a"]


def test_write_leaves_no_temp_files(store):
    store.save(make_record("a"))
    store.save(make_record("b"))
    assert [p.name for p in store.path.parent.iterdir()] == ["applications.json"]


def test_not_an_array(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text('{"id": "a"}')
    with pytest.raises(PersistenceError):
        store.load_all()


def test_unwritable_location(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = JsonHistoryStore(blocker / "applications.json")
    with pytest.raises(PersistenceError):
        store.save(make_record("a"))


def _legacy_row(record_id, title, company, assets) -> str:
    payload = base64.b64encode(json.dumps(assets).encode()).decode()
    return f'"{record_id}","2024-01-0{record_id}T10:00:00.000Z","{title}","{company}",{payload}\n'


def test_import_legacy_csv(tmp_path, store):
    csv_path = tmp_path / "applications.csv"
    csv_path.write_text(
        "ID,Date,Title,Company,AssetsPayload\n"
        + _legacy_row("1", "Dev", "Acme, Inc.", {"resumeHtml": "<p>1</p>"})
        + '"2","2024-01-02","Broken","Co",!!!notbase64\n'
        + _legacy_row("3", 'Say ""hi""', "Beta", {"resumeHtml": "<p>3</p>", "coverLetter": "Dear"})
    )

    assert import_legacy_csv(csv_path, store) == 2
    # second run finds nothing new
    assert import_legacy_csv(csv_path, store) == 0

    tracker = PipelineTracker(store)
    records = tracker.load()
    assert [r.id for r in records] == ["1", "3"]
    assert records[0].company == "Acme, Inc."
    assert records[1].title == 'Say "hi"'
    assert records[1].assets.cover_letter == "Dear"
    assert all(r.overall_status is OverallStatus.ACTIVE for r in records)
    assert all(r.stages[0].label == "Applied" for r in records)


def test_import_missing_legacy_file(tmp_path, store):
    assert import_legacy_csv(tmp_path / "nope.csv", store) == 0


def test_profile_store(tmp_path):
    profiles = ProfileStore(tmp_path / "user_data" / "profile.md")
    assert profiles.load() is None
    profiles.save("# Jane Doe\n\nPython developer.")
    assert profiles.load() == "# Jane Doe\n\nPython developer."


def test_import_legacy_latin1_payload(tmp_path, store):
    # payloads were written as Latin-1 bytes, one byte per character
    payload = base64.b64encode(json.dumps({"resumeHtml": "<p>Café</p>"}, ensure_ascii=False).encode("latin-1")).decode()
    csv_path = tmp_path / "applications.csv"
    csv_path.write_text(
        "ID,Date,Title,Company,AssetsPayload\n"
        f'"1","2024-01-01T10:00:00.000Z","Dev","Acme",{payload}\n'
    )

    assert import_legacy_csv(csv_path, store) == 1
    assert store.load_all()[0]["assets"]["resumeHtml"] == "<p>Café</p>"
