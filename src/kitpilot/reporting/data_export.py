"""JSON / CSV export helpers."""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path

from kitpilot.history.views import current_stage_index, status_badge
from kitpilot.models import ApplicationRecord

logger = logging.getLogger(__name__)

_CSV_HEADERS = ["id", "date", "title", "company", "status", "badge", "current_stage", "stages"]


def _summary_row(record: ApplicationRecord) -> dict[str, str]:
    idx = current_stage_index(record)
    return {
        "id": record.id,
        "date": record.date,
        "title": record.title,
        "company": record.company,
        "status": record.overall_status.value if record.overall_status else "",
        "badge": status_badge(record).label,
        "current_stage": record.stages[idx].label if idx >= 0 else "",
        "stages": " > ".join(s.label for s in record.stages),
    }


def export_json(records: list[ApplicationRecord]) -> str:
    """Export full records (assets included) as a JSON array."""
    return json.dumps([r.to_dict() for r in records], indent=2)


def export_csv(records: list[ApplicationRecord]) -> str:
    """Export one summary line per record as CSV."""
    if not records:
        return ""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_CSV_HEADERS, lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow(_summary_row(record))
    return buf.getvalue()


def export_to_file(
    records: list[ApplicationRecord],
    output_dir: str | Path,
    fmt: str = "json",
) -> Path:
    """Write an export file and return its path.

    *fmt* is ``"json"`` or ``"csv"``.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        content = export_csv(records)
        suffix = ".csv"
    else:
        content = export_json(records)
        suffix = ".json"

    dest = output_dir / f"applications_export{suffix}"
    dest.write_text(content, encoding="utf-8")
    logger.info("Exported %s to %s.", fmt.upper(), dest)
    return dest
