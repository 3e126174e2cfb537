"""
Alliance comparison: classify every catalog field for one alliance and roll the
discrepancies up into an alliance status, confidence and score delta.
"""
from __future__ import annotations

from typing import Iterable, Optional

from shared.models.domain import (
    AllianceValidation,
    Discrepancy,
    Number,
    ScoutedAllianceData,
    TBAAllianceData,
    ValidationConfig,
)
from shared.models.enums import Alliance, ConfidenceLevel, FieldKind, Severity, ValidationStatus
from shared.utils.logging import get_logger

from validation.catalog import FieldCatalog
from validation.classifier import create_discrepancy
from validation.config import resolve_thresholds

logger = get_logger(__name__)

TOTAL_SCORE_CATEGORY = "total-score"
TOTAL_SCORE_FIELD = "totalScore"
TOTAL_SCORE_LABEL = "Total Score"

_CONFIDENCE_BY_STATUS: dict[ValidationStatus, ConfidenceLevel] = {
    ValidationStatus.PASSED: ConfidenceLevel.HIGH,
    ValidationStatus.FLAGGED: ConfidenceLevel.MEDIUM,
    ValidationStatus.FAILED: ConfidenceLevel.LOW,
}


def status_for(discrepancies: Iterable[Discrepancy]) -> ValidationStatus:
    """failed on any critical, flagged on any discrepancy, else passed."""
    found = False
    for d in discrepancies:
        if d.severity == Severity.CRITICAL:
            return ValidationStatus.FAILED
        found = True
    return ValidationStatus.FLAGGED if found else ValidationStatus.PASSED


def confidence_for(status: ValidationStatus) -> ConfidenceLevel:
    return _CONFIDENCE_BY_STATUS.get(status, ConfidenceLevel.LOW)


def empty_alliance_validation(alliance: Alliance) -> AllianceValidation:
    """Placeholder for alliances that were never compared."""
    return AllianceValidation(
        alliance=alliance,
        status=ValidationStatus.PENDING,
        confidence=ConfidenceLevel.LOW,
    )


class AllianceComparator:
    """Compares one alliance's scouted totals against the official breakdown."""

    def __init__(self, catalog: FieldCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    def scouted_points(self, scouted: ScoutedAllianceData) -> Optional[Number]:
        """Caller-supplied estimate, else the catalog point weights, else None."""
        if scouted.estimated_points is not None:
            return scouted.estimated_points
        weighted = [m for m in self._catalog if m.points is not None]
        if not weighted:
            return None
        return sum(self._scouted_value(scouted, m.key, m.kind) * m.points for m in weighted)

    @staticmethod
    def _scouted_value(scouted: ScoutedAllianceData, key: str, kind: FieldKind) -> Number:
        source = scouted.actions if kind == FieldKind.ACTION else scouted.toggles
        return source.get(key, 0)

    def field_discrepancies(
        self,
        scouted: ScoutedAllianceData,
        tba: TBAAllianceData,
        config: ValidationConfig,
    ) -> list[Discrepancy]:
        discrepancies: list[Discrepancy] = []
        for mapping in self._catalog:
            if mapping.category in config.disabled_categories:
                continue
            scouted_value = self._scouted_value(scouted, mapping.key, mapping.kind)
            tba_value = tba.breakdown.get(mapping.key, 0)
            if scouted_value == tba_value:
                continue
            d = create_discrepancy(
                mapping.category,
                mapping.key,
                mapping.display_label,
                scouted_value,
                tba_value,
                resolve_thresholds(mapping.category, config),
            )
            if d is not None:
                discrepancies.append(d)
        return discrepancies

    def compare(
        self,
        scouted: ScoutedAllianceData,
        tba: TBAAllianceData,
        config: ValidationConfig,
    ) -> AllianceValidation:
        discrepancies = self.field_discrepancies(scouted, tba, config)

        scouted_points = self.scouted_points(scouted)
        if (
            config.check_total_score
            and scouted_points is not None
            and TOTAL_SCORE_CATEGORY not in config.disabled_categories
            and scouted_points != tba.total_points
        ):
            d = create_discrepancy(
                TOTAL_SCORE_CATEGORY,
                TOTAL_SCORE_FIELD,
                TOTAL_SCORE_LABEL,
                scouted_points,
                tba.total_points,
                resolve_thresholds(TOTAL_SCORE_CATEGORY, config),
            )
            if d is not None:
                discrepancies.append(d)

        status = status_for(discrepancies)
        total_scouted = scouted_points if scouted_points is not None else 0
        total_tba = tba.total_points
        score_diff = total_tba - total_scouted

        return AllianceValidation(
            alliance=tba.alliance,
            status=status,
            confidence=confidence_for(status),
            discrepancies=discrepancies,
            total_scouted_points=total_scouted,
            total_tba_points=total_tba,
            score_difference=score_diff,
            score_percent_diff=abs(score_diff) / total_tba * 100 if total_tba > 0 else 0.0,
            scouted_data=scouted,
            tba_data=tba,
        )
