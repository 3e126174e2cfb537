"""
Discrepancy classification.
Absolute-count thresholds are evaluated before percentage thresholds so that
small-count fields (0 vs 1) are not flagged critical on a 100% difference alone.
"""
from __future__ import annotations

from typing import Optional

from shared.models.domain import Discrepancy, Number, ValidationThresholds
from shared.models.enums import Severity
from shared.utils.logging import get_logger

logger = get_logger(__name__)


def percent_difference(scouted: Number, authoritative: Number) -> float:
    """|s - a| / a * 100; 100 when the authoritative value is 0 and they differ."""
    diff = abs(scouted - authoritative)
    if authoritative > 0:
        return diff / authoritative * 100
    return 100.0 if diff > 0 else 0.0


def severity_for(absolute_diff: Number, percent_diff: float, thresholds: ValidationThresholds) -> Severity:
    if absolute_diff >= thresholds.critical_absolute:
        return Severity.CRITICAL
    if absolute_diff >= thresholds.warning_absolute:
        return Severity.WARNING
    if absolute_diff >= thresholds.minor_absolute:
        return Severity.MINOR

    if percent_diff >= thresholds.critical:
        return Severity.CRITICAL
    if percent_diff >= thresholds.warning:
        return Severity.WARNING
    if percent_diff >= thresholds.minor:
        return Severity.MINOR
    return Severity.NONE


def classify(scouted: Number, authoritative: Number, thresholds: ValidationThresholds) -> Severity:
    """Severity of the disagreement between a scouted and an authoritative value."""
    return severity_for(
        abs(scouted - authoritative),
        percent_difference(scouted, authoritative),
        thresholds,
    )


def _fmt(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_message(label: str, scouted: Number, authoritative: Number) -> str:
    direction = "over-counted" if scouted > authoritative else "under-counted"
    diff = abs(scouted - authoritative)
    return (
        f"{label}: Scouted {_fmt(scouted)}, Authoritative {_fmt(authoritative)} "
        f"({direction} by {_fmt(diff)})"
    )


def create_discrepancy(
    category: str,
    field: str,
    field_label: str,
    scouted: Number,
    authoritative: Number,
    thresholds: ValidationThresholds,
) -> Optional[Discrepancy]:
    """Discrepancy record, or None when the difference classifies as none."""
    difference = abs(scouted - authoritative)
    percent = percent_difference(scouted, authoritative)
    severity = severity_for(difference, percent, thresholds)
    if severity == Severity.NONE:
        return None

    logger.debug(
        "discrepancy_classified",
        field=field,
        category=category,
        scouted=scouted,
        authoritative=authoritative,
        severity=severity.value,
    )
    return Discrepancy(
        category=category,
        field=field,
        field_label=field_label,
        scouted_value=scouted,
        tba_value=authoritative,
        difference=difference,
        percent_diff=percent,
        severity=severity,
        message=build_message(field_label, scouted, authoritative),
    )
