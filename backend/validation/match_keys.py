"""
Match key parsing, formatting and ordering.
Handles qualification (evt_qm15), semifinal (evt_sf1m1) and final (evt_f1m2) keys;
anything else falls back to best-effort digit extraction and never raises.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable, TypeVar, Union

from shared.models.domain import ParsedMatchKey
from shared.models.enums import CompLevel
from shared.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_QUAL_RE = re.compile(r"^qm(\d*)")
_SEMI_RE = re.compile(r"^sf(\d+)m(\d+)$")
_FINAL_RE = re.compile(r"^f(\d+)m(\d+)$")

# qm < sf < f < anything else
COMP_LEVEL_RANK: dict[str, int] = {
    CompLevel.QUALIFICATION.value: 1,
    CompLevel.SEMIFINAL.value: 2,
    CompLevel.FINAL.value: 3,
}
UNKNOWN_COMP_LEVEL_RANK = 4


def parse_match_key(match_key: str) -> ParsedMatchKey:
    """
    Split a match key into event, comp level, set and match number.

    parse_match_key("2025mrcmp_qm15")  -> qm, set 1, match 15
    parse_match_key("2025mrcmp_sf1m1") -> sf, set 1, match 1
    parse_match_key("2025mrcmp_f1m2")  -> f,  set 1, match 2 (display "2")
    """
    event_key, _, match_part = (match_key or "").rpartition("_")

    m = _QUAL_RE.match(match_part)
    if m:
        number = int(m.group(1)) if m.group(1) else 0
        recognized = bool(event_key) and bool(m.group(1)) and m.end() == len(match_part)
        if not recognized:
            logger.warning("match_key_unrecognized", match_key=match_key)
        return ParsedMatchKey(
            event_key=event_key,
            comp_level=CompLevel.QUALIFICATION.value,
            match_number=number,
            set_number=1,
            display_number=str(number),
            recognized=recognized,
        )

    m = _SEMI_RE.match(match_part)
    if m:
        return ParsedMatchKey(
            event_key=event_key,
            comp_level=CompLevel.SEMIFINAL.value,
            set_number=int(m.group(1)),
            match_number=int(m.group(2)),
            display_number=f"{m.group(1)}-{m.group(2)}",
            recognized=bool(event_key),
        )

    m = _FINAL_RE.match(match_part)
    if m:
        return ParsedMatchKey(
            event_key=event_key,
            comp_level=CompLevel.FINAL.value,
            set_number=int(m.group(1)),
            match_number=int(m.group(2)),
            display_number=m.group(2),
            recognized=bool(event_key),
        )

    digits = re.sub(r"\D", "", match_part)
    logger.warning("match_key_unrecognized", match_key=match_key)
    return ParsedMatchKey(
        event_key=event_key,
        comp_level=re.sub(r"\d", "", match_part),
        match_number=int(digits) if digits else 0,
        set_number=1,
        display_number=digits or "0",
        recognized=False,
    )


def format_match_key(parsed: ParsedMatchKey) -> str:
    """Render the canonical key for a parsed match key."""
    if parsed.comp_level == CompLevel.QUALIFICATION.value:
        part = f"qm{parsed.match_number}"
    elif parsed.comp_level in (CompLevel.SEMIFINAL.value, CompLevel.FINAL.value):
        part = f"{parsed.comp_level}{parsed.set_number}m{parsed.match_number}"
    else:
        part = f"{parsed.comp_level}{parsed.display_number}"
    return f"{parsed.event_key}_{part}" if parsed.event_key else part


def _key_of(match_key_or_result: Union[str, Any]) -> str:
    if isinstance(match_key_or_result, str):
        return match_key_or_result
    return match_key_or_result.match_key


def format_match_label(match_key_or_result: Union[str, Any]) -> str:
    """Human label: 'Qual 15', 'SF 1-1', 'Final 2', else 'Match <digits>'."""
    parsed = parse_match_key(_key_of(match_key_or_result))
    if parsed.comp_level == CompLevel.QUALIFICATION.value:
        return f"Qual {parsed.match_number}"
    if parsed.comp_level == CompLevel.SEMIFINAL.value:
        return f"SF {parsed.set_number}-{parsed.match_number}"
    if parsed.comp_level == CompLevel.FINAL.value:
        return f"Final {parsed.match_number}"
    return f"Match {parsed.display_number}"


def match_sort_key(match_key: str) -> tuple[int, int, int]:
    parsed = parse_match_key(match_key)
    rank = COMP_LEVEL_RANK.get(parsed.comp_level, UNKNOWN_COMP_LEVEL_RANK)
    return rank, parsed.set_number, parsed.match_number


def compare_match_keys(a: str, b: str) -> int:
    """Order by comp level rank, then set number, then match number."""
    ka, kb = match_sort_key(a), match_sort_key(b)
    return (ka > kb) - (ka < kb)


def sort_by_match_key(items: Iterable[T], key: Callable[[T], str] = _key_of) -> list[T]:
    """Stable sort of keys or keyed objects into match order."""
    return sorted(items, key=lambda item: match_sort_key(key(item)))
