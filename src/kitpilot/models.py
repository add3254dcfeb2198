"""Domain models for KitPilot.

Every model round-trips through ``to_dict`` / ``from_dict`` using the camelCase
keys of the on-disk history file.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

SEED_STAGE_LABEL = "Applied"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class OverallStatus(str, Enum):
    """Top-level state of an application."""

    ACTIVE = "active"
    REJECTED = "rejected"
    HIRED = "hired"
    GHOSTED = "ghosted"


class SortKey(str, Enum):
    """Orderings offered by the history list."""

    TIME = "time"
    AZ = "az"
    PROGRESS = "progress"


class AssetType(str, Enum):
    """Names of the fields in a :class:`GeneratedAssets` bundle."""

    RESUME_HTML = "resumeHtml"
    COVER_LETTER = "coverLetter"
    STRATEGY_STORY = "strategyStory"
    INTERVIEW_PREP = "interviewPrep"
    EMAIL_KIT = "emailKit"


@dataclass(frozen=True)
class InterviewQuestion:
    """One likely interview question with context and a suggested answer."""

    question: str
    context: str = ""
    suggested_answer: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "question": self.question,
            "context": self.context,
            "suggestedAnswer": self.suggested_answer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InterviewQuestion:
        return cls(
            question=str(data.get("question", "")),
            context=str(data.get("context", "")),
            suggested_answer=str(data.get("suggestedAnswer", "")),
        )


@dataclass(frozen=True)
class EmailKit:
    """Outreach messages for a single application."""

    linkedin_connection: str = ""
    follow_up_email: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "linkedInConnection": self.linkedin_connection,
            "followUpEmail": self.follow_up_email,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmailKit:
        return cls(
            linkedin_connection=str(data.get("linkedInConnection", "")),
            follow_up_email=str(data.get("followUpEmail", "")),
        )


# AssetType -> dataclass attribute on GeneratedAssets
_ASSET_FIELDS: dict[AssetType, str] = {
    AssetType.RESUME_HTML: "resume_html",
    AssetType.COVER_LETTER: "cover_letter",
    AssetType.STRATEGY_STORY: "strategy_story",
    AssetType.INTERVIEW_PREP: "interview_prep",
    AssetType.EMAIL_KIT: "email_kit",
}


@dataclass(frozen=True)
class GeneratedAssets:
    """Partially-populated bundle of generated content.

    ``resume_html`` is always present; the other assets stay ``None`` until
    they have been generated.
    """

    resume_html: str = ""
    cover_letter: str | None = None
    strategy_story: str | None = None
    interview_prep: tuple[InterviewQuestion, ...] | None = None
    email_kit: EmailKit | None = None

    def get(self, asset_type: AssetType | str) -> Any:
        return getattr(self, _ASSET_FIELDS[AssetType(asset_type)])

    def missing(self) -> list[AssetType]:
        """Return the optional asset types that have not been generated yet."""
        return [
            t for t in AssetType
            if t is not AssetType.RESUME_HTML and self.get(t) is None
        ]

    def merged(self, asset_type: AssetType | str, payload: Any) -> GeneratedAssets:
        """Return a copy with *asset_type* set to *payload*."""
        asset_type = AssetType(asset_type)
        if asset_type is AssetType.INTERVIEW_PREP and payload is not None:
            payload = tuple(payload)
        return replace(self, **{_ASSET_FIELDS[asset_type]: payload})

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"resumeHtml": self.resume_html}
        if self.cover_letter is not None:
            data["coverLetter"] = self.cover_letter
        if self.strategy_story is not None:
            data["strategyStory"] = self.strategy_story
        if self.interview_prep is not None:
            data["interviewPrep"] = [q.to_dict() for q in self.interview_prep]
        if self.email_kit is not None:
            data["emailKit"] = self.email_kit.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GeneratedAssets:
        data = data or {}
        prep = data.get("interviewPrep")
        kit = data.get("emailKit")
        return cls(
            resume_html=str(data.get("resumeHtml") or ""),
            cover_letter=data.get("coverLetter"),
            strategy_story=data.get("strategyStory"),
            interview_prep=(
                tuple(InterviewQuestion.from_dict(q) for q in prep)
                if prep is not None else None
            ),
            email_kit=EmailKit.from_dict(kit) if kit is not None else None,
        )


@dataclass
class RecruitmentStage:
    """One milestone in an application's pipeline."""

    id: str
    label: str
    completed: bool = False
    current: bool = False
    date: str | None = None  # stamped the first time the stage becomes current

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "completed": self.completed,
            "current": self.current,
        }
        if self.date is not None:
            data["date"] = self.date
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecruitmentStage:
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", "")),
            completed=bool(data.get("completed", False)),
            current=bool(data.get("current", False)),
            date=data.get("date"),
        )


def seed_stage(date: str) -> RecruitmentStage:
    """Build the "Applied" stage every record starts with."""
    return RecruitmentStage(
        id="1", label=SEED_STAGE_LABEL, completed=True, current=True, date=date
    )


@dataclass
class ApplicationRecord:
    """One tracked job application.

    ``overall_status`` is ``None`` and ``stages`` empty only for legacy records
    between decoding and the tracker's load-time back-fill.
    """

    id: str
    date: str
    title: str
    company: str
    description: str = ""
    profile_content: str = ""
    assets: GeneratedAssets = field(default_factory=GeneratedAssets)
    overall_status: OverallStatus | None = OverallStatus.ACTIVE
    stages: list[RecruitmentStage] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        title: str,
        company: str,
        description: str = "",
        profile_content: str = "",
        assets: GeneratedAssets | None = None,
    ) -> ApplicationRecord:
        """Build a freshly-saved application with its seed stage."""
        created = utc_now_iso()
        return cls(
            id=new_id(),
            date=created,
            title=title,
            company=company,
            description=description,
            profile_content=profile_content,
            assets=assets or GeneratedAssets(),
            overall_status=OverallStatus.ACTIVE,
            stages=[seed_stage(created)],
        )

    def copy(self) -> ApplicationRecord:
        return replace(self, stages=[replace(s) for s in self.stages])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "company": self.company,
            "description": self.description,
            "profileContent": self.profile_content,
            "assets": self.assets.to_dict(),
            "overallStatus": (
                self.overall_status.value if self.overall_status else None
            ),
            "stages": [s.to_dict() for s in self.stages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApplicationRecord:
        status = data.get("overallStatus")
        return cls(
            id=str(data["id"]),
            date=str(data.get("date", "")),
            title=str(data.get("title", "")),
            company=str(data.get("company", "")),
            description=str(data.get("description") or ""),
            profile_content=str(data.get("profileContent") or ""),
            assets=GeneratedAssets.from_dict(data.get("assets")),
            overall_status=OverallStatus(status) if status else None,
            stages=[RecruitmentStage.from_dict(s) for s in data.get("stages") or []],
        )
