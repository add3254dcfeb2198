"""Derived, side-effect-free views over application records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, NamedTuple

from kitpilot.models import ApplicationRecord, OverallStatus, SortKey


class StatusBadge(NamedTuple):
    label: str
    style: str


def current_stage_index(record: ApplicationRecord) -> int:
    """Return the index of the stage flagged current, or ``-1``."""
    for idx, stage in enumerate(record.stages):
        if stage.current:
            return idx
    return -1


def progress_score(record: ApplicationRecord) -> int:
    """Score used by the ``progress`` ordering; higher sorts first."""
    if record.overall_status is OverallStatus.REJECTED:
        return -1
    if record.overall_status is OverallStatus.GHOSTED:
        return 0
    # active and hired both rank by pipeline depth
    return max(current_stage_index(record), 0) + 1


def _timestamp(record: ApplicationRecord) -> float:
    try:
        parsed = datetime.fromisoformat(record.date.replace("Z", "+00:00"))
    except ValueError:
        return float("-inf")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def sorted_view(
    records: Iterable[ApplicationRecord], sort_key: SortKey | str
) -> list[ApplicationRecord]:
    """Return *records* ordered by *sort_key* without touching the input.

    Python's sort is stable, so records with equal keys keep their input
    order and repeated calls on unchanged data give the same result.
    """
    sort_key = SortKey(sort_key)
    items = list(records)
    if sort_key is SortKey.AZ:
        return sorted(items, key=lambda r: r.company.casefold())
    if sort_key is SortKey.PROGRESS:
        return sorted(items, key=progress_score, reverse=True)
    return sorted(items, key=_timestamp, reverse=True)


def status_badge(record: ApplicationRecord) -> StatusBadge:
    """Return the label and style class shown next to a record."""
    status = record.overall_status
    if status is OverallStatus.REJECTED:
        return StatusBadge("Rejected", "rejected")
    if status is OverallStatus.HIRED:
        return StatusBadge("Hired", "hired")
    if status is OverallStatus.GHOSTED:
        return StatusBadge("No Response", "ghosted")

    idx = current_stage_index(record)
    if idx == -1:
        return StatusBadge("Unknown", "unknown")
    if idx == 0:
        return StatusBadge("Applied", "applied")
    return StatusBadge(record.stages[idx].label, "active")
