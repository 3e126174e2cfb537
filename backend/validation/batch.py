"""
Event-wide validation: validates every scouted match of an event with bounded
concurrency, stores each result, and reports progress as matches complete.
A failing match is logged and recorded; it never aborts the run.
"""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from shared.models.domain import (
    MatchValidationResult,
    ScoutingEntry,
    TBAMatch,
    ValidationProgress,
    ValidationSummary,
)
from shared.models.enums import ProgressPhase
from shared.utils.logging import bind_event_context, get_logger
from shared.utils.metrics import BATCH_IN_PROGRESS, BATCH_RUNS, VALIDATION_LATENCY, atrack_latency

from validation.config import ValidationSettings, get_validation_settings
from validation.engine import MatchValidator
from validation.filters import sort_validation_results
from validation.repository import ResultRepository
from validation.summary import SummaryAccumulator

logger = get_logger(__name__)

ProgressCallback = Callable[[ValidationProgress], Any]


@dataclass
class MatchWorkItem:
    """One match to validate: the official record (if published) and its scouting entries."""
    match_key: str
    tba_match: Optional[TBAMatch] = None
    entries: list[ScoutingEntry] = field(default_factory=list)


@dataclass
class BatchOutcome:
    event_key: str
    results: list[MatchValidationResult] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cancelled: bool = False
    accumulator: SummaryAccumulator = field(default_factory=SummaryAccumulator)

    @property
    def outcome(self) -> str:
        if self.cancelled:
            return "cancelled"
        return "partial" if self.failed else "completed"

    def summary(self, generated_at: Optional[datetime] = None) -> ValidationSummary:
        return self.accumulator.to_summary(self.event_key, generated_at)


class BatchValidator:
    """Runs MatchValidator over an event's matches and upserts results into a repository."""

    def __init__(
        self,
        validator: MatchValidator,
        repository: ResultRepository,
        settings: Optional[ValidationSettings] = None,
    ) -> None:
        self._validator = validator
        self._repository = repository
        self._settings = settings or get_validation_settings()

    async def run(
        self,
        event_key: str,
        work_items: Sequence[MatchWorkItem],
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> BatchOutcome:
        """
        Validate every work item that has scouting entries.

        Every item lands in the summary: unscouted items as no-scouting, items
        that failed or were cut off by cancellation as pending, the rest through
        their result. Progress is reported after each attempted match, whether
        it succeeded or not.
        """
        outcome = BatchOutcome(event_key=event_key)
        todo: list[MatchWorkItem] = []
        for item in work_items:
            if item.entries:
                todo.append(item)
            else:
                outcome.skipped.append(item.match_key)
                outcome.accumulator.add_unscouted_match()

        total = len(todo)
        completed = 0
        sem = asyncio.Semaphore(max(1, self._settings.max_concurrent_validations))

        async def validate_one(item: MatchWorkItem) -> SummaryAccumulator:
            nonlocal completed
            async with sem:
                if cancel is not None and cancel.is_set():
                    if not outcome.cancelled:
                        logger.info("batch_validation_cancelled", completed=completed)
                    outcome.cancelled = True
                    return SummaryAccumulator().add_pending_match()
                try:
                    result = await asyncio.to_thread(
                        self._validator.validate_entries, item.match_key, item.tba_match, item.entries,
                    )
                    async with atrack_latency(VALIDATION_LATENCY, phase="store"):
                        await self._repository.put(result)
                except Exception as e:
                    logger.exception("batch_match_error", match_key=item.match_key, error=str(e))
                    outcome.failed.append(item.match_key)
                    partial = SummaryAccumulator().add_pending_match()
                else:
                    outcome.results.append(result)
                    partial = SummaryAccumulator().add_validated_match(result)

                completed += 1
                await _notify(on_progress, ValidationProgress(
                    current=completed,
                    total=total,
                    current_match=item.match_key,
                    phase=ProgressPhase.VALIDATING,
                ))
                return partial

        with bind_event_context(event_key):
            logger.info("batch_validation_started", matches=total, skipped=len(outcome.skipped))
            BATCH_IN_PROGRESS.inc()
            try:
                partials = await asyncio.gather(*(validate_one(item) for item in todo))
            finally:
                BATCH_IN_PROGRESS.dec()

            for partial in partials:
                outcome.accumulator = outcome.accumulator.merge(partial)
            outcome.results = sort_validation_results(outcome.results)

            BATCH_RUNS.labels(outcome=outcome.outcome).inc()
            logger.info(
                "batch_validation_finished",
                outcome=outcome.outcome,
                validated=len(outcome.results),
                failed=len(outcome.failed),
                skipped=len(outcome.skipped),
                pending=outcome.accumulator.pending_matches,
            )
        return outcome


async def _notify(callback: Optional[ProgressCallback], progress: ValidationProgress) -> None:
    if callback is None:
        return
    ret = callback(progress)
    if inspect.isawaitable(ret):
        await ret
