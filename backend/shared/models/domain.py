"""
Pydantic v2 domain models shared across the match validation services.
These are the canonical wire/internal representations; results are immutable values.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.models.enums import (
    Alliance,
    ConfidenceLevel,
    MatchTypeFilter,
    ProgressPhase,
    ScoutingStatusFilter,
    Severity,
    SortBy,
    SortOrder,
    StatusFilter,
    ValidationStatus,
)

Number = Union[int, float]


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class FrozenModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)


# ── Configuration values ────────────────────────────────────────────────
class ValidationThresholds(FrozenModel):
    """
    Severity cut-offs. Absolute thresholds are checked before percentage
    thresholds; ordering between the tiers is the caller's responsibility.
    """
    critical: float = 25.0
    warning: float = 15.0
    minor: float = 5.0
    critical_absolute: float = 5.0
    warning_absolute: float = 3.0
    minor_absolute: float = 1.0


class ValidationConfig(FrozenModel):
    thresholds: ValidationThresholds = Field(default_factory=ValidationThresholds)
    category_thresholds: dict[str, ValidationThresholds] = Field(default_factory=dict)
    disabled_categories: frozenset[str] = frozenset()
    check_total_score: bool = False


# ── Match keys ──────────────────────────────────────────────────────────
class ParsedMatchKey(FrozenModel):
    event_key: str
    comp_level: str
    match_number: int
    set_number: int = 1
    display_number: str
    recognized: bool = True


# ── Authoritative (TBA) match record ────────────────────────────────────
class TBAAlliance(DomainModel):
    score: int = 0
    team_keys: list[str] = Field(default_factory=list)
    dq_team_keys: list[str] = Field(default_factory=list)
    surrogate_team_keys: list[str] = Field(default_factory=list)


class TBAAlliances(DomainModel):
    red: TBAAlliance = Field(default_factory=TBAAlliance)
    blue: TBAAlliance = Field(default_factory=TBAAlliance)


class TBAMatch(DomainModel):
    """Official post-match record. score_breakdown is game-specific and opaque."""
    key: str
    event_key: str = ""
    comp_level: str = "qm"
    match_number: int = 0
    set_number: int = 1
    alliances: TBAAlliances = Field(default_factory=TBAAlliances)
    score_breakdown: Optional[dict[str, Any]] = None
    winning_alliance: str = ""
    time: Optional[int] = None
    actual_time: Optional[int] = None
    predicted_time: Optional[int] = None
    post_result_time: Optional[int] = None

    def alliance(self, alliance: Alliance) -> TBAAlliance:
        return self.alliances.red if alliance == Alliance.RED else self.alliances.blue

    def breakdown_for(self, alliance: Alliance) -> Optional[dict[str, Any]]:
        if not self.score_breakdown:
            return None
        value = self.score_breakdown.get(alliance.value)
        return value if isinstance(value, dict) else None


class TBAAllianceData(FrozenModel):
    """Flat view of one alliance's authoritative data, keyed by catalog field."""
    alliance: Alliance
    teams: list[str] = Field(default_factory=list)
    total_points: Number = 0
    auto_points: Number = 0
    teleop_points: Number = 0
    foul_points: Number = 0
    foul_count: Number = 0
    tech_foul_count: Number = 0
    breakdown: dict[str, Number] = Field(default_factory=dict)


# ── Scouted data ────────────────────────────────────────────────────────
class ScoutingEntry(DomainModel):
    """One scout's record for one team in one match."""
    match_key: str = ""
    match_number: int = 0
    team_number: str
    alliance: Alliance
    scout_name: str = ""
    game_data: dict[str, Any] = Field(default_factory=dict)

    is_corrected: bool = False
    correction_count: int = 0
    last_corrected_at: Optional[datetime] = None
    last_corrected_by: Optional[str] = None
    correction_notes: Optional[str] = None
    original_scout_name: Optional[str] = None

    @field_validator("team_number", mode="before")
    @classmethod
    def _team_number_str(cls, v: Any) -> str:
        return str(v)


class ScoutedAllianceData(FrozenModel):
    """Scouted counts summed over the robots of one alliance."""
    alliance: Alliance
    match_key: str = ""
    match_number: str = ""
    event_key: str = ""
    teams: list[str] = Field(default_factory=list)
    scout_names: list[str] = Field(default_factory=list)
    actions: dict[str, Number] = Field(default_factory=dict)
    toggles: dict[str, Number] = Field(default_factory=dict)
    missing_teams: list[str] = Field(default_factory=list)
    scouted_teams_count: int = 0
    estimated_points: Optional[Number] = None


# ── Validation results ──────────────────────────────────────────────────
class Discrepancy(FrozenModel):
    category: str
    field: str
    field_label: str
    scouted_value: Number
    tba_value: Number
    difference: Number
    percent_diff: float
    severity: Severity
    message: str


class AllianceValidation(FrozenModel):
    alliance: Alliance
    status: ValidationStatus
    confidence: ConfidenceLevel
    discrepancies: list[Discrepancy] = Field(default_factory=list)
    total_scouted_points: Number = 0
    total_tba_points: Number = 0
    score_difference: Number = 0
    score_percent_diff: float = 0.0
    scouted_data: Optional[ScoutedAllianceData] = None
    tba_data: Optional[TBAAllianceData] = None


class TeamValidation(FrozenModel):
    team_number: str
    alliance: Alliance
    scout_name: str = ""
    has_scouted_data: bool
    discrepancies: list[Discrepancy] = Field(default_factory=list)
    confidence: ConfidenceLevel
    flag_for_review: bool = False
    notes: list[str] = Field(default_factory=list)

    is_corrected: bool = False
    correction_count: int = 0
    last_corrected_at: Optional[datetime] = None
    last_corrected_by: Optional[str] = None
    correction_notes: Optional[str] = None
    original_scout_name: Optional[str] = None


class MatchValidationResult(FrozenModel):
    """Match-level verdict. id is the persistence key: '{event_key}_{match_key}'."""
    id: str
    event_key: str
    match_key: str
    match_number: str
    comp_level: str
    set_number: int = 1

    status: ValidationStatus
    confidence: ConfidenceLevel

    red_alliance: AllianceValidation
    blue_alliance: AllianceValidation
    teams: list[TeamValidation] = Field(default_factory=list)

    total_discrepancies: int = 0
    critical_discrepancies: int = 0
    warning_discrepancies: int = 0
    flagged_for_review: bool = False
    requires_rescout: bool = False

    validated_at: datetime
    validated_by: Optional[str] = None
    notes: Optional[str] = None

    @property
    def minor_discrepancies(self) -> int:
        return self.total_discrepancies - self.critical_discrepancies - self.warning_discrepancies


class ValidationSummary(FrozenModel):
    event_key: str
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

    average_confidence: ConfidenceLevel = ConfidenceLevel.LOW
    matches_requiring_rescout: int = 0

    generated_at: datetime


# ── Match list (presentation input) ─────────────────────────────────────
class MatchListItem(DomainModel):
    match_key: str
    match_number: int = 0
    comp_level: str = "qm"
    set_number: int = 1
    display_name: str = ""

    red_teams: list[str] = Field(default_factory=list)
    blue_teams: list[str] = Field(default_factory=list)

    has_scouting: bool = False
    scouting_complete: bool = False
    red_teams_scouted: int = 0
    blue_teams_scouted: int = 0

    validation_result: Optional[MatchValidationResult] = None

    has_tba_results: bool = False
    red_score: Optional[int] = None
    blue_score: Optional[int] = None
    red_auto_score: Optional[Number] = None
    blue_auto_score: Optional[Number] = None
    red_teleop_score: Optional[Number] = None
    blue_teleop_score: Optional[Number] = None

    scheduled_time: Optional[int] = None
    actual_time: Optional[int] = None

    @property
    def effective_status(self) -> ValidationStatus:
        """Stored status, or the synthetic pending/no-scouting state when unvalidated."""
        if self.validation_result is not None:
            return self.validation_result.status
        return ValidationStatus.PENDING if self.has_scouting else ValidationStatus.NO_SCOUTING


class MatchFilters(DomainModel):
    status: StatusFilter = StatusFilter.ALL
    match_type: MatchTypeFilter = MatchTypeFilter.ALL
    scouting_status: ScoutingStatusFilter = ScoutingStatusFilter.ALL
    search_query: str = ""
    sort_by: SortBy = SortBy.MATCH
    sort_order: SortOrder = SortOrder.ASC


class ValidationProgress(FrozenModel):
    current: int
    total: int
    current_match: str = ""
    phase: ProgressPhase = ProgressPhase.VALIDATING
