"""Tests for model construction and on-disk encoding."""

from __future__ import annotations

from kitpilot.models import (
    ApplicationRecord,
    AssetType,
    EmailKit,
    GeneratedAssets,
    InterviewQuestion,
    OverallStatus,
)


def test_create_seeds_applied_stage():
    record = ApplicationRecord.create("Engineer", "Acme", "JD", "# Me")
    assert record.overall_status is OverallStatus.ACTIVE
    assert len(record.stages) == 1
    seed = record.stages[0]
    assert (seed.label, seed.completed, seed.current, seed.date) == ("Applied", True, True, record.date)
    assert record.id


def test_create_ids_differ():
    a = ApplicationRecord.create("Engineer", "Acme")
    b = ApplicationRecord.create("Engineer", "Acme")
    assert a.id != b.id


def test_partial_assets_encode_only_present_fields():
    assets = GeneratedAssets(resume_html="<p/>", cover_letter="Dear")
    assert assets.to_dict() == {"resumeHtml": "<p/>", "coverLetter": "Dear"}
    assert assets.missing() == [
        AssetType.STRATEGY_STORY,
        AssetType.INTERVIEW_PREP,
        AssetType.EMAIL_KIT,
    ]


def test_fully_populated_legacy_assets_decode():
    data = {
        "resumeHtml": "<p/>",
        "coverLetter": "Dear",
        "strategyStory": "Story",
        "interviewPrep": [{"question": "Q", "context": "C", "suggestedAnswer": "A"}],
        "emailKit": {"linkedInConnection": "Hi", "followUpEmail": "Hello again"},
    }
    assets = GeneratedAssets.from_dict(data)
    assert assets.missing() == []
    assert assets.interview_prep == (InterviewQuestion("Q", "C", "A"),)
    assert assets.email_kit == EmailKit("Hi", "Hello again")
    assert assets.to_dict() == data


def test_merged_returns_new_bundle():
    assets = GeneratedAssets(resume_html="<p/>")
    merged = assets.merged(AssetType.STRATEGY_STORY, "Story")
    assert merged.strategy_story == "Story"
    assert assets.strategy_story is None


def test_legacy_record_decodes_without_pipeline_fields():
    record = ApplicationRecord.from_dict(
        {"id": "1", "date": "2024-01-01", "title": "Dev", "company": "Co", "assets": {"resumeHtml": ""}}
    )
    assert record.overall_status is None
    assert record.stages == []
    assert record.description == ""
