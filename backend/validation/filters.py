"""
Match list building, filtering and sorting for presentation layers.
Pure functions over MatchListItem collections; sorts are stable.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Iterable, Optional, Sequence

from shared.models.domain import (
    MatchFilters,
    MatchListItem,
    MatchValidationResult,
    ScoutingEntry,
    TBAMatch,
)
from shared.models.enums import (
    Alliance,
    ConfidenceLevel,
    ScoutingStatusFilter,
    SortBy,
    SortOrder,
    StatusFilter,
    MatchTypeFilter,
    ValidationStatus,
)

from validation.extractor import as_number, extract_team_numbers
from validation.match_keys import compare_match_keys, format_match_label, sort_by_match_key
from validation.scouting import entries_for_match

TEAMS_PER_ALLIANCE = 3

STATUS_SORT_RANK: dict[ValidationStatus, int] = {
    ValidationStatus.FAILED: 0,
    ValidationStatus.FLAGGED: 1,
    ValidationStatus.PASSED: 2,
    ValidationStatus.PENDING: 3,
    ValidationStatus.NO_TBA_DATA: 4,
    ValidationStatus.NO_SCOUTING: 5,
}

CONFIDENCE_SORT_RANK: dict[ConfidenceLevel, int] = {
    ConfidenceLevel.HIGH: 2,
    ConfidenceLevel.MEDIUM: 1,
    ConfidenceLevel.LOW: 0,
}


# ── Building ────────────────────────────────────────────────────────────
def _first_number(breakdown: Optional[dict[str, Any]], *names: str) -> Optional[Any]:
    if not breakdown:
        return None
    for name in names:
        number = as_number(breakdown.get(name))
        if number is not None:
            return number
    return None


def create_match_list_item(match: TBAMatch) -> MatchListItem:
    """List item from an official record; scouting status starts empty."""
    red_breakdown = match.breakdown_for(Alliance.RED)
    blue_breakdown = match.breakdown_for(Alliance.BLUE)
    return MatchListItem(
        match_key=match.key,
        match_number=match.match_number,
        comp_level=match.comp_level,
        set_number=match.set_number or 1,
        display_name=format_match_label(match.key),
        red_teams=extract_team_numbers(match.alliances.red.team_keys),
        blue_teams=extract_team_numbers(match.alliances.blue.team_keys),
        has_tba_results=match.score_breakdown is not None,
        red_score=match.alliances.red.score,
        blue_score=match.alliances.blue.score,
        red_auto_score=_first_number(red_breakdown, "autoPoints", "auto_points"),
        blue_auto_score=_first_number(blue_breakdown, "autoPoints", "auto_points"),
        red_teleop_score=_first_number(red_breakdown, "teleopPoints", "teleop_points"),
        blue_teleop_score=_first_number(blue_breakdown, "teleopPoints", "teleop_points"),
        scheduled_time=match.time,
        actual_time=match.actual_time,
    )


def attach_scouting_status(item: MatchListItem, entries: Iterable[ScoutingEntry]) -> MatchListItem:
    """Copy of the item with scouted-team counts filled from the event's entries."""
    selected = entries_for_match(entries, item.match_key, item.match_number)
    red = {e.team_number for e in selected if e.alliance == Alliance.RED}
    blue = {e.team_number for e in selected if e.alliance == Alliance.BLUE}
    red_count = min(len(red), TEAMS_PER_ALLIANCE)
    blue_count = min(len(blue), TEAMS_PER_ALLIANCE)
    return item.model_copy(update={
        "has_scouting": bool(selected),
        "red_teams_scouted": red_count,
        "blue_teams_scouted": blue_count,
        "scouting_complete": red_count == TEAMS_PER_ALLIANCE and blue_count == TEAMS_PER_ALLIANCE,
    })


def attach_results(
    items: Iterable[MatchListItem],
    results: Iterable[MatchValidationResult],
) -> list[MatchListItem]:
    by_key = {r.match_key: r for r in results}
    return [
        item.model_copy(update={"validation_result": by_key[item.match_key]})
        if item.match_key in by_key else item
        for item in items
    ]


def sort_match_list(items: Iterable[MatchListItem]) -> list[MatchListItem]:
    return sort_by_match_key(items)


def sort_validation_results(results: Iterable[MatchValidationResult]) -> list[MatchValidationResult]:
    return sort_by_match_key(results)


# ── Filtering ───────────────────────────────────────────────────────────
def _status_matches(item: MatchListItem, wanted: StatusFilter) -> bool:
    if item.validation_result is None:
        if wanted == StatusFilter.NO_SCOUTING:
            return not item.has_scouting
        if wanted == StatusFilter.PENDING:
            return item.has_scouting
        return False
    return item.validation_result.status.value == wanted.value


def _scouting_matches(item: MatchListItem, wanted: ScoutingStatusFilter) -> bool:
    if wanted == ScoutingStatusFilter.COMPLETE:
        return item.scouting_complete
    if wanted == ScoutingStatusFilter.PARTIAL:
        return item.has_scouting and not item.scouting_complete
    if wanted == ScoutingStatusFilter.NONE:
        return not item.has_scouting
    return True


def _search_matches(item: MatchListItem, query: str) -> bool:
    if query in item.display_name.lower():
        return True
    return any(query in team.lower() for team in (*item.red_teams, *item.blue_teams))


# ── Sorting ─────────────────────────────────────────────────────────────
def _cmp(a: int, b: int) -> int:
    return (a > b) - (a < b)


def _compare(a: MatchListItem, b: MatchListItem, sort_by: SortBy) -> int:
    if sort_by == SortBy.STATUS:
        return _cmp(STATUS_SORT_RANK[a.effective_status], STATUS_SORT_RANK[b.effective_status])
    if sort_by == SortBy.DISCREPANCIES:
        da = a.validation_result.total_discrepancies if a.validation_result else 0
        db = b.validation_result.total_discrepancies if b.validation_result else 0
        return _cmp(da, db)
    if sort_by == SortBy.CONFIDENCE:
        ca = a.validation_result.confidence if a.validation_result else ConfidenceLevel.LOW
        cb = b.validation_result.confidence if b.validation_result else ConfidenceLevel.LOW
        return _cmp(CONFIDENCE_SORT_RANK[ca], CONFIDENCE_SORT_RANK[cb])
    return compare_match_keys(a.match_key, b.match_key)


def filter_and_sort(items: Sequence[MatchListItem], filters: MatchFilters) -> list[MatchListItem]:
    """Apply status, level, scouting and search filters, then a stable sort."""
    filtered = list(items)

    if filters.status != StatusFilter.ALL:
        filtered = [m for m in filtered if _status_matches(m, filters.status)]

    if filters.match_type != MatchTypeFilter.ALL:
        filtered = [m for m in filtered if m.comp_level == filters.match_type.value]

    if filters.scouting_status != ScoutingStatusFilter.ALL:
        filtered = [m for m in filtered if _scouting_matches(m, filters.scouting_status)]

    query = filters.search_query.strip().lower()
    if query:
        filtered = [m for m in filtered if _search_matches(m, query)]

    sign = -1 if filters.sort_order == SortOrder.DESC else 1
    return sorted(filtered, key=cmp_to_key(lambda a, b: sign * _compare(a, b, filters.sort_by)))
