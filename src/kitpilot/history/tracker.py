"""Recruitment pipeline tracker: in-memory application history mirrored to a store."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import replace
from typing import Any, Callable

from kitpilot.exceptions import (
    DeletionNotAllowedError,
    GenerationError,
    InvalidStageError,
    InvalidTransitionError,
    PersistenceError,
    RecordNotFoundError,
)
from kitpilot.generation.base import AssetGenerator, coerce_payload
from kitpilot.history.store import HistoryStore
from kitpilot.history.views import sorted_view
from kitpilot.models import (
    ApplicationRecord,
    AssetType,
    GeneratedAssets,
    OverallStatus,
    RecruitmentStage,
    SortKey,
    new_id,
    seed_stage,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

_DORMANT = (OverallStatus.REJECTED, OverallStatus.GHOSTED)


class PipelineTracker:
    """Owns the application records and every mutation applied to them.

    Each mutation updates the in-memory record first and then writes it
    through the store. Store errors propagate to the caller after the
    in-memory update, so the session view stays current even when the write
    did not land.
    """

    def __init__(
        self,
        store: HistoryStore,
        generator: AssetGenerator | None = None,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self._store = store
        self._generator = generator
        self._clock = clock
        self._records: list[ApplicationRecord] = []
        self._lock = threading.RLock()

    @property
    def records(self) -> list[ApplicationRecord]:
        """Tracked records in load/insertion order (a shallow copy)."""
        return list(self._records)

    # ---- loading ----

    def load(self) -> list[ApplicationRecord]:
        """Read every stored record and back-fill pre-pipeline fields.

        Records written before statuses and stages existed get ``active``
        and a single seed stage dated from the record itself. The back-fill
        is only written out with the record's next mutation.
        """
        raw = self._store.load_all()
        records = []
        upgraded = 0
        for data in raw:
            try:
                record = ApplicationRecord.from_dict(data)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise PersistenceError(
                    f"Malformed application in history: {exc!r}"
                ) from exc
            if record.overall_status is None or not record.stages:
                upgraded += 1
            if record.overall_status is None:
                record.overall_status = OverallStatus.ACTIVE
            if not record.stages:
                record.stages = [seed_stage(record.date)]
            records.append(record)

        with self._lock:
            self._records = records
        logger.info("Loaded %d application(s), %d upgraded from legacy format.", len(records), upgraded)
        return self.records

    def get(self, record_id: str) -> ApplicationRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    # ---- mutations ----

    def add_record(self, record: ApplicationRecord) -> ApplicationRecord:
        """Track a newly-saved application."""
        if not record.stages:
            record.stages = [seed_stage(record.date)]
        if record.overall_status is None:
            record.overall_status = OverallStatus.ACTIVE
        with self._lock:
            self._records.append(record)
            self._store.save(record)
        return record

    def set_overall_status(
        self, record: ApplicationRecord, status: OverallStatus | str
    ) -> None:
        """Set the top-level status; stages are left as they are."""
        try:
            status = OverallStatus(status)
        except ValueError:
            raise InvalidTransitionError(f"Unknown status {status!r}.") from None

        def change(updated: ApplicationRecord) -> None:
            updated.overall_status = status

        self._mutate(record, change)
        logger.info("Application %s marked %s.", record.id, status.value)

    def set_stage_current(self, record: ApplicationRecord, stage_index: int) -> None:
        """Make *stage_index* the current stage.

        Earlier stages become completed, later ones not. The new current
        stage is dated the first time it is reached. Moving the pipeline of
        a rejected or ghosted application makes it active again.
        """

        def change(updated: ApplicationRecord) -> None:
            if not 0 <= stage_index < len(updated.stages):
                raise InvalidStageError(
                    f"Stage index {stage_index} out of range for {len(updated.stages)} stage(s)."
                )
            for idx, stage in enumerate(updated.stages):
                stage.completed = idx < stage_index
                stage.current = idx == stage_index
                if stage.current and not stage.date:
                    stage.date = self._clock()
            if updated.overall_status in _DORMANT:
                logger.info("Application %s reactivated by stage change.", updated.id)
                updated.overall_status = OverallStatus.ACTIVE

        tracked = self._mutate(record, change)
        logger.info(
            "Application %s moved to stage %d (%s).",
            record.id, stage_index, tracked.stages[stage_index].label,
        )

    def add_stage(self, record: ApplicationRecord, label: str) -> RecruitmentStage | None:
        """Append a custom stage; blank labels are ignored."""
        label = label.strip()
        if not label:
            return None

        stage = RecruitmentStage(id=new_id(), label=label)
        self._mutate(record, lambda updated: updated.stages.append(replace(stage)))
        logger.info("Application %s gained stage %r.", record.id, label)
        return stage

    def update_assets(self, record: ApplicationRecord, assets: GeneratedAssets) -> None:
        """Replace the asset bundle, e.g. after a manual edit."""

        def change(updated: ApplicationRecord) -> None:
            updated.assets = assets

        self._mutate(record, change)

    def delete_record(self, record_id: str) -> None:
        """Remove a record from memory and storage; unknown IDs are ignored."""
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.id != record_id]
            if len(self._records) == before:
                logger.debug("Delete skipped: application %s not tracked.", record_id)
                return
            self._store.delete(record_id)
        logger.info("Application %s deleted.", record_id)

    def delete_rejected(self, record_id: str) -> None:
        """Delete a record, allowed only once it has been marked rejected."""
        record = self.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"No application with id {record_id!r}.")
        if record.overall_status is not OverallStatus.REJECTED:
            raise DeletionNotAllowedError(
                f"Application {record_id} is {record.overall_status.value}; "
                "only rejected applications can be deleted."
            )
        self.delete_record(record_id)

    async def generate_missing(
        self, record: ApplicationRecord, asset_type: AssetType | str
    ) -> Any:
        """Generate one asset from the record's saved job/profile context.

        The generator is awaited outside the mutation lock and the merged
        result is written from a worker thread. On failure the record is
        left untouched and ``GenerationError`` is raised.
        """
        if self._generator is None:
            raise GenerationError("No asset generator configured.")
        asset_type = AssetType(asset_type)

        try:
            payload = await self._generator.generate(
                asset_type,
                record.profile_content,
                record.title,
                record.company,
                record.description,
            )
        except GenerationError as exc:
            logger.warning("Generating %s for %s failed: %s", asset_type.value, record.id, exc)
            raise
        except Exception as exc:
            logger.warning("Generating %s for %s failed: %s", asset_type.value, record.id, exc)
            raise GenerationError(f"{asset_type.value} generation failed: {exc}") from exc

        payload = coerce_payload(asset_type, payload)

        def change(updated: ApplicationRecord) -> None:
            updated.assets = updated.assets.merged(asset_type, payload)

        # the history rewrite is blocking file I/O; keep it off the event loop
        await asyncio.to_thread(self._mutate, record, change)
        return payload

    # ---- views ----

    def sorted(self, sort_key: SortKey | str = SortKey.TIME) -> list[ApplicationRecord]:
        return sorted_view(self._records, sort_key)

    # ---- internals ----

    def _mutate(
        self,
        record: ApplicationRecord,
        change: Callable[[ApplicationRecord], None],
    ) -> ApplicationRecord:
        """Apply *change* to the tracked copy of *record*, then persist.

        The change always starts from the tracked record, so a caller holding
        an out-of-date object cannot overwrite fields changed since. If
        *change* raises, nothing is modified. *record* is synced afterwards.
        """
        with self._lock:
            tracked = self.get(record.id)
            if tracked is None:
                raise RecordNotFoundError(f"No application with id {record.id!r}.")
            updated = tracked.copy()
            change(updated)
            vars(tracked).update(vars(updated))
            if record is not tracked:
                vars(record).update(vars(tracked.copy()))
            self._store.update(tracked)
            return tracked
