"""
Scouting aggregation: per-team scouting entries summed into alliance-level
action counts and toggle counts keyed by the field catalog.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from shared.models.domain import Number, ScoutedAllianceData, ScoutingEntry
from shared.models.enums import Alliance, GamePhase
from shared.utils.logging import get_logger

from validation.catalog import FieldCatalog
from validation.extractor import as_number
from validation.match_keys import parse_match_key

logger = get_logger(__name__)

_PHASES = tuple(p.value for p in GamePhase)


def flatten_game_data(game_data: dict[str, Any]) -> dict[str, Any]:
    """Merge auto/teleop/endgame sub-dicts into one flat dict; top-level keys win."""
    flat: dict[str, Any] = {}
    for phase in _PHASES:
        phase_data = game_data.get(phase)
        if isinstance(phase_data, dict):
            flat.update(phase_data)
    for key, value in game_data.items():
        if key not in _PHASES:
            flat[key] = value
    return flat


def _toggle_set(value: Any) -> bool:
    return value is True or as_number(value) == 1


def entries_for_match(
    entries: Iterable[ScoutingEntry],
    match_key: str,
    match_number: int = 0,
) -> list[ScoutingEntry]:
    """Entries for one match; entries without a key fall back to the match number."""
    out: list[ScoutingEntry] = []
    for entry in entries:
        if entry.match_key:
            if entry.match_key == match_key:
                out.append(entry)
        elif match_number and entry.match_number == match_number:
            out.append(entry)
    return out


def aggregate_alliance(
    alliance: Alliance,
    entries: Iterable[ScoutingEntry],
    catalog: FieldCatalog,
    match_key: str = "",
    expected_teams: Sequence[str] = (),
) -> ScoutedAllianceData:
    """Sum one alliance's entries. Entries for the other alliance are ignored."""
    own = [e for e in entries if e.alliance == alliance]

    actions: dict[str, Number] = {m.key: 0 for m in catalog.actions}
    toggles: dict[str, Number] = {m.key: 0 for m in catalog.toggles}

    for entry in own:
        flat = flatten_game_data(entry.game_data)
        for mapping in catalog.actions:
            value = flat.get(mapping.key)
            if value is None:
                value = flat.get(f"{mapping.key}Count")
            number = as_number(value)
            if number is not None:
                actions[mapping.key] += number
        for mapping in catalog.toggles:
            if _toggle_set(flat.get(mapping.key)):
                toggles[mapping.key] += 1

    scouted = {e.team_number for e in own}
    missing = [t for t in expected_teams if t not in scouted]
    if missing:
        logger.debug("alliance_missing_teams", match_key=match_key, alliance=alliance.value, teams=missing)

    parsed = parse_match_key(match_key) if match_key else None
    return ScoutedAllianceData(
        alliance=alliance,
        match_key=match_key,
        match_number=str(parsed.match_number) if parsed else "",
        event_key=parsed.event_key if parsed else "",
        teams=[e.team_number for e in own],
        scout_names=[e.scout_name for e in own],
        actions=actions,
        toggles=toggles,
        missing_teams=missing,
        scouted_teams_count=len(own),
    )
