"""Protocol for the service that writes missing application assets."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from kitpilot.exceptions import GenerationError
from kitpilot.models import AssetType, EmailKit, InterviewQuestion


@runtime_checkable
class AssetGenerator(Protocol):
    """Produces one asset for a job/profile pair.

    Calls are slow (tens of seconds) and may fail on network, quota or
    parse errors.
    """

    async def generate(
        self,
        asset_type: AssetType,
        profile_content: str,
        job_title: str,
        job_company: str,
        job_description: str,
    ) -> Any:
        """Return the payload for *asset_type*."""
        ...


def coerce_payload(asset_type: AssetType | str, payload: Any) -> Any:
    """Normalise a generator payload into the model type for *asset_type*.

    Text assets must be strings, interview prep a list of questions and the
    outreach kit a two-field mapping. Anything else raises ``GenerationError``.
    """
    asset_type = AssetType(asset_type)

    if asset_type is AssetType.INTERVIEW_PREP:
        if not isinstance(payload, (list, tuple)):
            raise GenerationError(f"{asset_type.value}: expected a list, got {type(payload).__name__}.")
        questions = []
        for item in payload:
            if isinstance(item, InterviewQuestion):
                questions.append(item)
            elif isinstance(item, dict) and "question" in item:
                questions.append(InterviewQuestion.from_dict(item))
            else:
                raise GenerationError(f"{asset_type.value}: malformed question {item!r}.")
        return tuple(questions)

    if asset_type is AssetType.EMAIL_KIT:
        if isinstance(payload, EmailKit):
            return payload
        if isinstance(payload, dict):
            return EmailKit.from_dict(payload)
        raise GenerationError(f"{asset_type.value}: expected a mapping, got {type(payload).__name__}.")

    if not isinstance(payload, str):
        raise GenerationError(f"{asset_type.value}: expected text, got {type(payload).__name__}.")
    return payload
