"""
Authoritative data extraction.
Walks the official score breakdown using catalog paths and produces a flat
field -> number map. Missing or wrong-typed values resolve to 0, never raise.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from shared.models.domain import Number, TBAAllianceData, TBAMatch
from shared.models.enums import Alliance, MappingType
from shared.utils.logging import get_logger

from validation.catalog import FieldCatalog, FieldMapping

logger = get_logger(__name__)

_MISSING = object()


def get_nested_value(obj: Any, path: str) -> Any:
    """Dot-path lookup ('hubScore.autoCount'); None when any segment is missing."""
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part, _MISSING)
        if current is _MISSING:
            return None
    return current


def as_number(value: Any) -> Optional[Number]:
    """Numeric value or None. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def lookup_number(obj: Any, path: str) -> Number:
    number = as_number(get_nested_value(obj, path))
    return number if number is not None else 0


def is_truthy_flag(value: Any) -> bool:
    """Official records encode flags as true or 'Yes'."""
    return value is True or value == "Yes"


def _paths(mapping: FieldMapping) -> list[str]:
    return [mapping.path] if isinstance(mapping.path, str) else list(mapping.path)


def _targets(match_value: Any) -> list[str]:
    if match_value is None:
        return []
    return [match_value] if isinstance(match_value, str) else list(match_value)


def extract_value(breakdown: dict[str, Any], mapping: FieldMapping) -> Number:
    """Resolve one catalog field against an alliance breakdown."""
    paths = _paths(mapping)

    if mapping.type == MappingType.COUNT_MATCHING:
        targets = _targets(mapping.match_value)
        if len(targets) != 1:
            return 0
        return sum(1 for p in paths if get_nested_value(breakdown, p) == targets[0])

    if mapping.type == MappingType.COUNT_MATCHING_ANY:
        targets = _targets(mapping.match_value)
        count = 0
        for p in paths:
            value = get_nested_value(breakdown, p)
            if isinstance(value, str) and value in targets:
                count += 1
        return count

    if mapping.type == MappingType.BOOLEAN:
        return sum(1 for p in paths if is_truthy_flag(get_nested_value(breakdown, p)))

    return sum(lookup_number(breakdown, p) for p in paths)


def extract_team_numbers(team_keys: Iterable[str]) -> list[str]:
    """['frc1', 'frc254'] -> ['1', '254']"""
    return [key.replace("frc", "", 1) for key in team_keys]


def extract_alliance_data(
    alliance: Alliance,
    teams: list[str],
    breakdown: Optional[dict[str, Any]],
    score: Number,
    catalog: FieldCatalog,
) -> TBAAllianceData:
    """Flatten one alliance's breakdown into catalog-keyed values plus standard totals."""
    if not breakdown:
        return TBAAllianceData(alliance=alliance, teams=teams, total_points=score or 0)

    values: dict[str, Number] = {}
    for mapping in catalog:
        values[mapping.key] = extract_value(breakdown, mapping)

    return TBAAllianceData(
        alliance=alliance,
        teams=teams,
        total_points=score or 0,
        auto_points=lookup_number(breakdown, "autoPoints"),
        teleop_points=lookup_number(breakdown, "teleopPoints"),
        foul_points=lookup_number(breakdown, "foulPoints"),
        foul_count=lookup_number(breakdown, "foulCount"),
        tech_foul_count=lookup_number(breakdown, "techFoulCount"),
        breakdown=values,
    )


def extract_match_data(match: TBAMatch, catalog: FieldCatalog) -> dict[Alliance, TBAAllianceData]:
    """Both alliances of one official record."""
    out: dict[Alliance, TBAAllianceData] = {}
    for alliance in Alliance:
        record = match.alliance(alliance)
        out[alliance] = extract_alliance_data(
            alliance,
            extract_team_numbers(record.team_keys),
            match.breakdown_for(alliance),
            record.score,
            catalog,
        )
    return out
