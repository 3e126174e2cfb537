"""
Match validation engine.
Parses the match key, extracts the official breakdown, compares both alliances,
and assembles the immutable match-level result. Pure apart from the clock.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from shared.models.domain import (
    AllianceValidation,
    MatchValidationResult,
    ScoutedAllianceData,
    ScoutingEntry,
    TBAMatch,
    TeamValidation,
    ValidationConfig,
)
from shared.models.enums import Alliance, ConfidenceLevel, Severity, ValidationStatus
from shared.utils.logging import get_logger
from shared.utils.metrics import DISCREPANCIES, MATCHES_VALIDATED, VALIDATION_LATENCY, track_latency

from validation.catalog import FieldCatalog
from validation.comparator import AllianceComparator, confidence_for, empty_alliance_validation
from validation.config import get_validation_settings
from validation.extractor import extract_match_data, extract_team_numbers
from validation.match_keys import parse_match_key
from validation.scouting import aggregate_alliance, entries_for_match

logger = get_logger(__name__)

NOTE_NO_SCOUTING = "No scouting data for this team"
NOTE_OFF_ROSTER = "Team not on the official alliance roster"

_STATUS_RANK: dict[ValidationStatus, int] = {
    ValidationStatus.PASSED: 0,
    ValidationStatus.FLAGGED: 1,
    ValidationStatus.FAILED: 2,
}


def result_id(event_key: str, match_key: str) -> str:
    return f"{event_key}_{match_key}"


def worst_status(*statuses: ValidationStatus) -> ValidationStatus:
    """failed > flagged > passed."""
    return max(statuses, key=lambda s: _STATUS_RANK.get(s, 0))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchValidator:
    """Validates one match at a time; holds no per-match state between calls."""

    def __init__(
        self,
        catalog: FieldCatalog,
        config: Optional[ValidationConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        validated_by: Optional[str] = None,
    ) -> None:
        self._catalog = catalog
        self._config = config or get_validation_settings().to_validation_config()
        self._comparator = AllianceComparator(catalog)
        self._clock = clock or _utcnow
        self._validated_by = validated_by

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    @property
    def config(self) -> ValidationConfig:
        return self._config

    def validate(
        self,
        match_key: str,
        tba_match: Optional[TBAMatch],
        red: ScoutedAllianceData,
        blue: ScoutedAllianceData,
        entries: Sequence[ScoutingEntry] = (),
    ) -> MatchValidationResult:
        """Compare both alliances' scouted totals against the official record."""
        if tba_match is None or not tba_match.score_breakdown:
            return self._terminal_result(match_key, tba_match, ValidationStatus.NO_TBA_DATA)

        with track_latency(VALIDATION_LATENCY, phase="compare"):
            parsed = parse_match_key(match_key)
            event_key = parsed.event_key or tba_match.event_key
            official = extract_match_data(tba_match, self._catalog)

            red_result = self._comparator.compare(red, official[Alliance.RED], self._config)
            blue_result = self._comparator.compare(blue, official[Alliance.BLUE], self._config)

            status = worst_status(red_result.status, blue_result.status)
            discrepancies = [*red_result.discrepancies, *blue_result.discrepancies]
            critical = sum(1 for d in discrepancies if d.severity == Severity.CRITICAL)
            warning = sum(1 for d in discrepancies if d.severity == Severity.WARNING)

            result = MatchValidationResult(
                id=result_id(event_key, match_key),
                event_key=event_key,
                match_key=match_key,
                match_number=str(parsed.match_number),
                comp_level=parsed.comp_level,
                set_number=parsed.set_number,
                status=status,
                confidence=confidence_for(status),
                red_alliance=red_result,
                blue_alliance=blue_result,
                teams=self._team_validations(tba_match, entries, red_result, blue_result),
                total_discrepancies=len(discrepancies),
                critical_discrepancies=critical,
                warning_discrepancies=warning,
                flagged_for_review=status in (ValidationStatus.FLAGGED, ValidationStatus.FAILED),
                requires_rescout=status == ValidationStatus.FAILED,
                validated_at=self._clock(),
                validated_by=self._validated_by,
            )

        MATCHES_VALIDATED.labels(status=status.value).inc()
        for d in discrepancies:
            DISCREPANCIES.labels(severity=d.severity.value, category=d.category).inc()
        logger.info(
            "match_validated",
            match_key=match_key,
            status=status.value,
            discrepancies=len(discrepancies),
            critical=critical,
        )
        return result

    def validate_entries(
        self,
        match_key: str,
        tba_match: Optional[TBAMatch],
        entries: Iterable[ScoutingEntry],
    ) -> MatchValidationResult:
        """Aggregate per-team entries into alliance totals, then validate."""
        if tba_match is None or not tba_match.score_breakdown:
            return self._terminal_result(match_key, tba_match, ValidationStatus.NO_TBA_DATA)

        parsed = parse_match_key(match_key)
        selected = entries_for_match(entries, match_key, parsed.match_number)
        if not selected:
            return self._terminal_result(match_key, tba_match, ValidationStatus.NO_SCOUTING)

        red = aggregate_alliance(
            Alliance.RED, selected, self._catalog, match_key,
            extract_team_numbers(tba_match.alliances.red.team_keys),
        )
        blue = aggregate_alliance(
            Alliance.BLUE, selected, self._catalog, match_key,
            extract_team_numbers(tba_match.alliances.blue.team_keys),
        )
        return self.validate(match_key, tba_match, red, blue, selected)

    def _terminal_result(
        self,
        match_key: str,
        tba_match: Optional[TBAMatch],
        status: ValidationStatus,
    ) -> MatchValidationResult:
        parsed = parse_match_key(match_key)
        event_key = parsed.event_key or (tba_match.event_key if tba_match else "")
        MATCHES_VALIDATED.labels(status=status.value).inc()
        logger.info("match_not_compared", match_key=match_key, status=status.value)
        return MatchValidationResult(
            id=result_id(event_key, match_key),
            event_key=event_key,
            match_key=match_key,
            match_number=str(parsed.match_number),
            comp_level=parsed.comp_level,
            set_number=parsed.set_number,
            status=status,
            confidence=ConfidenceLevel.LOW,
            red_alliance=empty_alliance_validation(Alliance.RED),
            blue_alliance=empty_alliance_validation(Alliance.BLUE),
            validated_at=self._clock(),
            validated_by=self._validated_by,
        )

    def _team_validations(
        self,
        tba_match: TBAMatch,
        entries: Sequence[ScoutingEntry],
        red: AllianceValidation,
        blue: AllianceValidation,
    ) -> list[TeamValidation]:
        teams: list[TeamValidation] = []
        for alliance_result in (red, blue):
            alliance = alliance_result.alliance
            roster = extract_team_numbers(tba_match.alliance(alliance).team_keys)
            flag = alliance_result.status == ValidationStatus.FAILED
            own = [e for e in entries if e.alliance == alliance]

            for team in roster:
                entry = next((e for e in own if e.team_number == team), None)
                if entry is None:
                    teams.append(TeamValidation(
                        team_number=team,
                        alliance=alliance,
                        has_scouted_data=False,
                        confidence=ConfidenceLevel.LOW,
                        flag_for_review=flag,
                        notes=[NOTE_NO_SCOUTING],
                    ))
                else:
                    teams.append(_team_from_entry(entry, alliance_result.confidence, flag))

            for entry in own:
                if entry.team_number not in roster:
                    team = _team_from_entry(entry, alliance_result.confidence, flag)
                    teams.append(team.model_copy(update={"notes": [NOTE_OFF_ROSTER]}))
        return teams


def _team_from_entry(entry: ScoutingEntry, confidence: ConfidenceLevel, flag: bool) -> TeamValidation:
    return TeamValidation(
        team_number=entry.team_number,
        alliance=entry.alliance,
        scout_name=entry.scout_name,
        has_scouted_data=True,
        confidence=confidence,
        flag_for_review=flag,
        is_corrected=entry.is_corrected,
        correction_count=entry.correction_count,
        last_corrected_at=entry.last_corrected_at,
        last_corrected_by=entry.last_corrected_by,
        correction_notes=entry.correction_notes,
        original_scout_name=entry.original_scout_name,
    )


def rescout_targets(result: MatchValidationResult) -> list[TeamValidation]:
    """Teams on failed alliances. Empty when nothing needs re-scouting."""
    failed = {
        a.alliance
        for a in (result.red_alliance, result.blue_alliance)
        if a.status == ValidationStatus.FAILED
    }
    return [t for t in result.teams if t.alliance in failed]
