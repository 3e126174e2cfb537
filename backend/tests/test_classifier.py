"""
Unit tests for discrepancy severity classification.

Run: pytest backend/tests/test_classifier.py -v
"""
from __future__ import annotations

import pytest

from shared.models.domain import ValidationThresholds
from shared.models.enums import Severity
from validation.classifier import build_message, classify, create_discrepancy, percent_difference

DEFAULTS = ValidationThresholds()


# ── Percent difference ──────────────────────────────────────────────────

def test_percent_difference_relative_to_authoritative() -> None:
    assert percent_difference(12, 10) == pytest.approx(20.0)
    assert percent_difference(8, 10) == pytest.approx(20.0)


def test_percent_difference_zero_authoritative() -> None:
    assert percent_difference(3, 0) == 100.0
    assert percent_difference(0, 0) == 0.0


# ── Severity ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("scouted,authoritative,expected", [
    (10, 10, Severity.NONE),
    (0, 0, Severity.NONE),
    (11, 10, Severity.MINOR),      # abs 1
    (1, 0, Severity.MINOR),        # 100% but only 1 off
    (0, 1, Severity.MINOR),
    (13, 10, Severity.WARNING),    # abs 3
    (15, 10, Severity.CRITICAL),   # abs 5
    (45, 50, Severity.CRITICAL),
    (0, 5, Severity.CRITICAL),
])
def test_classify_default_thresholds(scouted: int, authoritative: int, expected: Severity) -> None:
    assert classify(scouted, authoritative, DEFAULTS) == expected


def test_absolute_checked_before_percentage() -> None:
    # 2 off of 4 is 50%, but absolute tier says minor
    assert classify(6, 4, DEFAULTS) == Severity.MINOR


def test_percentage_applies_below_absolute_minimum() -> None:
    thresholds = ValidationThresholds(critical_absolute=100, warning_absolute=50, minor_absolute=10)
    assert classify(0.5, 1, thresholds) == Severity.CRITICAL
    assert classify(8.4, 10, thresholds) == Severity.WARNING
    assert classify(9.4, 10, thresholds) == Severity.MINOR
    assert classify(9.8, 10, thresholds) == Severity.NONE


def test_classify_is_monotonic_in_difference() -> None:
    previous = Severity.NONE
    for scouted in range(20, 41):
        current = classify(scouted, 20, DEFAULTS)
        assert current.rank >= previous.rank
        previous = current


# ── Discrepancy records ─────────────────────────────────────────────────

def test_create_discrepancy_none_when_equal() -> None:
    assert create_discrepancy("endgame", "climbL3", "Level 3 Climb", 2, 2, DEFAULTS) is None


def test_create_discrepancy_fields() -> None:
    d = create_discrepancy("auto-scoring", "autoFuelScored", "Auto Fuel Scored", 16, 10, DEFAULTS)
    assert d is not None
    assert d.severity == Severity.CRITICAL
    assert d.difference == 6
    assert d.percent_diff == pytest.approx(60.0)
    assert d.scouted_value == 16
    assert d.tba_value == 10
    assert d.message == "Auto Fuel Scored: Scouted 16, Authoritative 10 (over-counted by 6)"


def test_build_message_under_counted() -> None:
    assert build_message("Climbed", 1, 3) == "Climbed: Scouted 1, Authoritative 3 (under-counted by 2)"


def test_build_message_integral_floats() -> None:
    assert build_message("Total Score", 40.0, 42.5) == (
        "Total Score: Scouted 40, Authoritative 42.5 (under-counted by 2.5)"
    )
