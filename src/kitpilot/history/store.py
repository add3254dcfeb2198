"""JSON-file application history, legacy CSV import and profile storage."""

from __future__ import annotations

import base64
import binascii
import csv
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from kitpilot.exceptions import PersistenceError
from kitpilot.models import ApplicationRecord

logger = logging.getLogger(__name__)

_LEGACY_COLUMNS = ("ID", "Date", "Title", "Company", "AssetsPayload")


@runtime_checkable
class HistoryStore(Protocol):
    """Storage backend the pipeline tracker persists through."""

    def load_all(self) -> list[dict[str, Any]]:
        """Return every stored record in storage order."""
        ...

    def save(self, record: ApplicationRecord) -> None:
        """Append a new record."""
        ...

    def update(self, record: ApplicationRecord) -> None:
        """Replace the stored record with the same ID; no-op if absent."""
        ...

    def delete(self, record_id: str) -> None:
        """Remove the stored record with *record_id*; no-op if absent."""
        ...


class JsonHistoryStore:
    """History kept as a single JSON array on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            with open(self._path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read history at {self._path}: {exc}") from exc
        if not isinstance(data, list):
            raise PersistenceError(f"History at {self._path} is not a JSON array.")
        return data

    def save(self, record: ApplicationRecord) -> None:
        rows = self.load_all()
        rows.append(record.to_dict())
        self._write(rows)
        logger.info("Saved application %s (%s @ %s).", record.id, record.title, record.company)

    def update(self, record: ApplicationRecord) -> None:
        rows = self.load_all()
        for i, row in enumerate(rows):
            if row.get("id") == record.id:
                rows[i] = record.to_dict()
                self._write(rows)
                return
        logger.debug("Update skipped: no stored record with id %s.", record.id)

    def delete(self, record_id: str) -> None:
        rows = self.load_all()
        kept = [r for r in rows if r.get("id") != record_id]
        if len(kept) == len(rows):
            logger.debug("Delete skipped: no stored record with id %s.", record_id)
            return
        self._write(kept)

    def _write(self, rows: list[dict[str, Any]]) -> None:
        """Replace the file atomically so a crash never leaves partial JSON."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self._path.parent, prefix=".history-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(rows, fh, indent=2)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Cannot write history at {self._path}: {exc}") from exc


def _decode_legacy_row(row: list[str]) -> dict[str, Any] | None:
    if len(row) < len(_LEGACY_COLUMNS):
        return None
    record_id, date, title, company, payload = row[:5]
    try:
        # legacy payloads are Latin-1 encoded JSON
        assets = json.loads(base64.b64decode(payload.strip(), validate=True).decode("latin-1"))
    except (binascii.Error, ValueError) as exc:
        logger.warning("Skipping legacy row %s: bad asset payload (%s).", record_id, exc)
        return None
    return {
        "id": record_id,
        "date": date,
        "title": title,
        "company": company,
        "assets": assets,
    }


def import_legacy_csv(csv_path: str | Path, store: HistoryStore) -> int:
    """Copy records from an old ``applications.csv`` into *store*.

    Rows already present (by ID) are left alone. Imported rows carry no
    status or stages; those are back-filled when the tracker loads them.
    Returns the number of records imported.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        logger.info("No legacy history at %s.", csv_path)
        return 0

    known = {r.get("id") for r in store.load_all()}
    imported = 0
    try:
        with open(csv_path, newline="", encoding="utf-8") as fh:
            reader = csv.reader(fh)
            header = next(reader, None)
            if header is None:
                return 0
            for row in reader:
                data = _decode_legacy_row(row)
                if data is None or data["id"] in known:
                    continue
                store.save(ApplicationRecord.from_dict(data))
                known.add(data["id"])
                imported += 1
    except OSError as exc:
        raise PersistenceError(f"Cannot read legacy history at {csv_path}: {exc}") from exc

    logger.info("Imported %d legacy application(s) from %s.", imported, csv_path)
    return imported


class ProfileStore:
    """The candidate profile, kept as a markdown file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def save(self, content: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot write profile at {self._path}: {exc}") from exc
        logger.info("Profile saved to %s.", self._path)

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot read profile at {self._path}: {exc}") from exc
