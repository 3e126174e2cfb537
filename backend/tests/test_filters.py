"""
Unit tests for match list building, filtering and sorting.

Run: pytest backend/tests/test_filters.py -v
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest

from shared.models.domain import AllianceValidation, MatchFilters, MatchListItem, MatchValidationResult
from shared.models.enums import (
    Alliance,
    ConfidenceLevel,
    MatchTypeFilter,
    ScoutingStatusFilter,
    SortBy,
    SortOrder,
    StatusFilter,
    ValidationStatus,
)
from validation.filters import (
    attach_results,
    attach_scouting_status,
    create_match_list_item,
    filter_and_sort,
    sort_match_list,
    sort_validation_results,
)

from conftest import make_entries, make_tba_match

NOW = datetime(2026, 3, 14, tzinfo=timezone.utc)


def _result(key: str, status: ValidationStatus, confidence: ConfidenceLevel, total: int = 0) -> MatchValidationResult:
    alliance = AllianceValidation(alliance=Alliance.RED, status=status, confidence=confidence)
    return MatchValidationResult(
        id=f"2026test_{key}",
        event_key="2026test",
        match_key=key,
        match_number="1",
        comp_level="qm",
        status=status,
        confidence=confidence,
        red_alliance=alliance,
        blue_alliance=alliance,
        total_discrepancies=total,
        validated_at=NOW,
    )


def _item(
    key: str,
    comp_level: str = "qm",
    has_scouting: bool = True,
    complete: bool = True,
    result: Optional[MatchValidationResult] = None,
    display_name: str = "",
    red: tuple[str, ...] = ("100", "200", "300"),
) -> MatchListItem:
    return MatchListItem(
        match_key=key,
        comp_level=comp_level,
        display_name=display_name or key,
        red_teams=list(red),
        blue_teams=["400", "500", "600"],
        has_scouting=has_scouting,
        scouting_complete=complete,
        validation_result=result,
    )


@pytest.fixture
def items() -> list[MatchListItem]:
    return [
        _item("e_qm2", result=_result("e_qm2", ValidationStatus.PASSED, ConfidenceLevel.HIGH),
              display_name="Qual 2"),
        _item("e_qm10", result=_result("e_qm10", ValidationStatus.FAILED, ConfidenceLevel.LOW, 4),
              display_name="Qual 10", red=("254", "200", "300")),
        _item("e_qm1", result=_result("e_qm1", ValidationStatus.FLAGGED, ConfidenceLevel.MEDIUM, 1),
              display_name="Qual 1"),
        _item("e_sf1m1", comp_level="sf", complete=False, display_name="SF 1-1"),
        _item("e_f1m1", comp_level="f", has_scouting=False, complete=False, display_name="Final 1"),
        _item("e_qm3", result=_result("e_qm3", ValidationStatus.NO_TBA_DATA, ConfidenceLevel.LOW),
              display_name="Qual 3"),
    ]


def _keys(items: list[MatchListItem]) -> list[str]:
    return [m.match_key for m in items]


# ── Filtering ───────────────────────────────────────────────────────────

def test_default_filters_sort_by_match(items: list[MatchListItem]) -> None:
    assert _keys(filter_and_sort(items, MatchFilters())) == [
        "e_qm1", "e_qm2", "e_qm3", "e_qm10", "e_sf1m1", "e_f1m1",
    ]


@pytest.mark.parametrize("status,expected", [
    (StatusFilter.PASSED, ["e_qm2"]),
    (StatusFilter.FAILED, ["e_qm10"]),
    (StatusFilter.FLAGGED, ["e_qm1"]),
    (StatusFilter.NO_TBA_DATA, ["e_qm3"]),
    (StatusFilter.PENDING, ["e_sf1m1"]),
    (StatusFilter.NO_SCOUTING, ["e_f1m1"]),
])
def test_status_filter(items: list[MatchListItem], status: StatusFilter, expected: list[str]) -> None:
    assert _keys(filter_and_sort(items, MatchFilters(status=status))) == expected


def test_match_type_filter(items: list[MatchListItem]) -> None:
    result = filter_and_sort(items, MatchFilters(match_type=MatchTypeFilter.SEMIFINAL))
    assert _keys(result) == ["e_sf1m1"]


def test_scouting_status_filter(items: list[MatchListItem]) -> None:
    partial = filter_and_sort(items, MatchFilters(scouting_status=ScoutingStatusFilter.PARTIAL))
    none = filter_and_sort(items, MatchFilters(scouting_status=ScoutingStatusFilter.NONE))
    complete = filter_and_sort(items, MatchFilters(scouting_status=ScoutingStatusFilter.COMPLETE))
    assert _keys(partial) == ["e_sf1m1"]
    assert _keys(none) == ["e_f1m1"]
    assert len(complete) == 4


def test_search_by_display_name_case_insensitive(items: list[MatchListItem]) -> None:
    assert _keys(filter_and_sort(items, MatchFilters(search_query="  final "))) == ["e_f1m1"]


def test_search_by_team_number(items: list[MatchListItem]) -> None:
    assert _keys(filter_and_sort(items, MatchFilters(search_query="254"))) == ["e_qm10"]


def test_filters_combine(items: list[MatchListItem]) -> None:
    filters = MatchFilters(match_type=MatchTypeFilter.QUALIFICATION, search_query="qual 1")
    assert _keys(filter_and_sort(items, filters)) == ["e_qm1", "e_qm10"]


def test_filtering_is_idempotent(items: list[MatchListItem]) -> None:
    filters = MatchFilters(match_type=MatchTypeFilter.QUALIFICATION, sort_by=SortBy.STATUS)
    once = filter_and_sort(items, filters)
    assert filter_and_sort(once, filters) == once


def test_input_not_mutated(items: list[MatchListItem]) -> None:
    before = list(items)
    filter_and_sort(items, MatchFilters(sort_by=SortBy.STATUS, sort_order=SortOrder.DESC))
    assert items == before


# ── Sorting ─────────────────────────────────────────────────────────────

def test_sort_by_status(items: list[MatchListItem]) -> None:
    result = filter_and_sort(items, MatchFilters(sort_by=SortBy.STATUS))
    assert _keys(result) == ["e_qm10", "e_qm1", "e_qm2", "e_sf1m1", "e_qm3", "e_f1m1"]


def test_sort_by_status_desc(items: list[MatchListItem]) -> None:
    result = filter_and_sort(items, MatchFilters(sort_by=SortBy.STATUS, sort_order=SortOrder.DESC))
    assert _keys(result) == ["e_f1m1", "e_qm3", "e_sf1m1", "e_qm2", "e_qm1", "e_qm10"]


def test_sort_by_discrepancies_is_stable(items: list[MatchListItem]) -> None:
    result = filter_and_sort(items, MatchFilters(sort_by=SortBy.DISCREPANCIES, sort_order=SortOrder.DESC))
    # ties keep input order
    assert _keys(result) == ["e_qm10", "e_qm1", "e_qm2", "e_sf1m1", "e_f1m1", "e_qm3"]


def test_sort_by_confidence(items: list[MatchListItem]) -> None:
    result = filter_and_sort(items, MatchFilters(sort_by=SortBy.CONFIDENCE))
    assert _keys(result)[-2:] == ["e_qm1", "e_qm2"]


def test_sort_helpers(items: list[MatchListItem]) -> None:
    assert _keys(sort_match_list(items)) == ["e_qm1", "e_qm2", "e_qm3", "e_qm10", "e_sf1m1", "e_f1m1"]
    results = [m.validation_result for m in items if m.validation_result is not None]
    assert [r.match_key for r in sort_validation_results(results)] == ["e_qm1", "e_qm2", "e_qm3", "e_qm10"]


# ── Building ────────────────────────────────────────────────────────────

def test_create_match_list_item() -> None:
    item = create_match_list_item(make_tba_match())
    assert item.match_key == "2026test_qm12"
    assert item.display_name == "Qual 12"
    assert item.red_teams == ["100", "200", "300"]
    assert item.has_tba_results
    assert item.red_score == 85
    assert item.red_auto_score == 20
    assert item.blue_teleop_score == 45
    assert item.actual_time == 1773512460
    assert not item.has_scouting
    assert item.effective_status == ValidationStatus.NO_SCOUTING


def test_create_match_list_item_unplayed() -> None:
    item = create_match_list_item(make_tba_match(with_breakdown=False))
    assert not item.has_tba_results
    assert item.red_auto_score is None


def test_attach_scouting_status() -> None:
    item = create_match_list_item(make_tba_match())
    entries = [e for e in make_entries() if e.team_number != "500"]
    updated = attach_scouting_status(item, entries)
    assert updated.has_scouting
    assert updated.red_teams_scouted == 3
    assert updated.blue_teams_scouted == 2
    assert not updated.scouting_complete
    assert updated.effective_status == ValidationStatus.PENDING
    assert not item.has_scouting


def test_attach_scouting_status_complete() -> None:
    updated = attach_scouting_status(create_match_list_item(make_tba_match()), make_entries())
    assert updated.scouting_complete


def test_attach_results() -> None:
    item = create_match_list_item(make_tba_match())
    result = _result("2026test_qm12", ValidationStatus.FLAGGED, ConfidenceLevel.MEDIUM)
    other = create_match_list_item(make_tba_match(key="2026test_qm13"))
    updated = attach_results([item, other], [result])
    assert updated[0].effective_status == ValidationStatus.FLAGGED
    assert updated[1].validation_result is None
