"""Shared test fixtures."""

from __future__ import annotations

import pytest

from kitpilot.history.store import JsonHistoryStore
from kitpilot.history.tracker import PipelineTracker
from kitpilot.models import (
    ApplicationRecord,
    GeneratedAssets,
    OverallStatus,
    RecruitmentStage,
    seed_stage,
)

FIXED_NOW = "2024-06-01T12:00:00+00:00"


def make_record(
    record_id: str = "r1",
    company: str = "Acme",
    date: str = "2024-05-01T09:00:00+00:00",
    status: OverallStatus = OverallStatus.ACTIVE,
    labels: tuple[str, ...] = (),
    current: int = 0,
) -> ApplicationRecord:
    """Build a record with the seed stage plus *labels*, current at *current*."""
    stages = [seed_stage(date)]
    for i, label in enumerate(labels, start=2):
        stages.append(RecruitmentStage(id=str(i), label=label))
    for idx, stage in enumerate(stages):
        stage.completed = idx < current
        stage.current = idx == current
    return ApplicationRecord(
        id=record_id,
        date=date,
        title="Engineer",
        company=company,
        description="Build things.",
        profile_content="# Jane Doe",
        assets=GeneratedAssets(resume_html="<h1>Jane</h1>"),
        overall_status=status,
        stages=stages,
    )


class FakeGenerator:
    """Records calls and returns a canned payload (or raises)."""

    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple] = []

    async def generate(self, asset_type, profile_content, job_title, job_company, job_description):
        self.calls.append((asset_type, profile_content, job_title, job_company, job_description))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture()
def store(tmp_path):
    return JsonHistoryStore(tmp_path / "Kits" / "applications.json")


@pytest.fixture()
def tracker(store):
    return PipelineTracker(store, clock=lambda: FIXED_NOW)


@pytest.fixture()
def tmp_settings_yaml(tmp_path):
    """Write a minimal settings.yaml and return its path."""
    content = """\
data_dir: "{data}"
history_file: "Kits/history.json"
default_sort: " Progress "
log_level: "debug"
""".format(data=str(tmp_path / "user_data"))
    p = tmp_path / "settings.yaml"
    p.write_text(content)
    return p
