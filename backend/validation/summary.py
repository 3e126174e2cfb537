"""
Event-wide summary statistics.
SummaryAccumulator is a commutative monoid: partial accumulators built over
disjoint chunks of matches merge field-by-field into the same totals as one pass.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Iterable, Optional

from shared.models.domain import MatchListItem, MatchValidationResult, ValidationSummary
from shared.models.enums import ConfidenceLevel, ValidationStatus
from shared.utils.logging import get_logger

logger = get_logger(__name__)

HIGH_CONFIDENCE_MIN = 2.5
MEDIUM_CONFIDENCE_MIN = 1.5


def confidence_label(average: float) -> ConfidenceLevel:
    if average >= HIGH_CONFIDENCE_MIN:
        return ConfidenceLevel.HIGH
    if average >= MEDIUM_CONFIDENCE_MIN:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


@dataclass
class SummaryAccumulator:
    total_matches: int = 0
    scouted_matches: int = 0
    validated_matches: int = 0
    pending_matches: int = 0
    passed_matches: int = 0
    flagged_matches: int = 0
    failed_matches: int = 0
    no_tba_data_matches: int = 0
    no_scouting_matches: int = 0

    total_discrepancies: int = 0
    critical_discrepancies: int = 0
    warning_discrepancies: int = 0
    minor_discrepancies: int = 0
    matches_requiring_rescout: int = 0

    # Numeric confidence state; the label is derived only in to_summary()
    confidence_score_total: int = 0
    confidence_count: int = 0

    def add_result(self, result: MatchValidationResult) -> SummaryAccumulator:
        self.validated_matches += 1
        if result.status == ValidationStatus.PASSED:
            self.passed_matches += 1
        elif result.status == ValidationStatus.FLAGGED:
            self.flagged_matches += 1
        elif result.status == ValidationStatus.FAILED:
            self.failed_matches += 1
        elif result.status == ValidationStatus.NO_TBA_DATA:
            self.no_tba_data_matches += 1
        elif result.status == ValidationStatus.NO_SCOUTING:
            self.no_scouting_matches += 1

        self.total_discrepancies += result.total_discrepancies
        self.critical_discrepancies += result.critical_discrepancies
        self.warning_discrepancies += result.warning_discrepancies
        self.minor_discrepancies += result.minor_discrepancies
        if result.requires_rescout:
            self.matches_requiring_rescout += 1

        self.confidence_score_total += result.confidence.score
        self.confidence_count += 1
        return self

    def add_validated_match(self, result: MatchValidationResult) -> SummaryAccumulator:
        """Count a match known only through its result."""
        self.total_matches += 1
        if result.status != ValidationStatus.NO_SCOUTING:
            self.scouted_matches += 1
        return self.add_result(result)

    def add_pending_match(self) -> SummaryAccumulator:
        """Count a scouted match that has no result yet (failed or not reached)."""
        self.total_matches += 1
        self.scouted_matches += 1
        self.pending_matches += 1
        return self

    def add_unscouted_match(self) -> SummaryAccumulator:
        self.total_matches += 1
        self.no_scouting_matches += 1
        return self

    def add_match_item(self, item: MatchListItem) -> SummaryAccumulator:
        """Count a scheduled match; unvalidated ones land in pending or no-scouting."""
        self.total_matches += 1
        if item.has_scouting:
            self.scouted_matches += 1
        if item.validation_result is not None:
            self.add_result(item.validation_result)
        elif item.has_scouting:
            self.pending_matches += 1
        else:
            self.no_scouting_matches += 1
        return self

    def merge(self, other: SummaryAccumulator) -> SummaryAccumulator:
        """Field-wise sum; neither operand is modified."""
        return SummaryAccumulator(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    __add__ = merge

    @property
    def average_confidence_score(self) -> Optional[float]:
        if self.confidence_count == 0:
            return None
        return self.confidence_score_total / self.confidence_count

    def to_summary(self, event_key: str, generated_at: Optional[datetime] = None) -> ValidationSummary:
        average = self.average_confidence_score
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data.pop("confidence_score_total")
        data.pop("confidence_count")
        return ValidationSummary(
            event_key=event_key,
            average_confidence=confidence_label(average) if average is not None else ConfidenceLevel.LOW,
            generated_at=generated_at or datetime.now(timezone.utc),
            **data,
        )


def accumulate_results(results: Iterable[MatchValidationResult]) -> SummaryAccumulator:
    acc = SummaryAccumulator()
    for result in results:
        acc.add_validated_match(result)
    return acc


def summarize_results(
    results: Iterable[MatchValidationResult],
    event_key: str,
    generated_at: Optional[datetime] = None,
) -> ValidationSummary:
    return accumulate_results(results).to_summary(event_key, generated_at)


def summarize_match_list(
    items: Iterable[MatchListItem],
    event_key: str,
    generated_at: Optional[datetime] = None,
) -> ValidationSummary:
    acc = SummaryAccumulator()
    for item in items:
        acc.add_match_item(item)
    summary = acc.to_summary(event_key, generated_at)
    logger.debug(
        "validation_summary_built",
        event_key=event_key,
        total=summary.total_matches,
        validated=summary.validated_matches,
        average_confidence=summary.average_confidence.value,
    )
    return summary


def find_duplicate_matches(results: Iterable[MatchValidationResult]) -> list[tuple[str, int]]:
    """Match keys that appear more than once, with their counts."""
    counts = Counter(r.match_key for r in results)
    return [(key, n) for key, n in counts.items() if n > 1]
