"""Domain enumerations for match validation."""
from __future__ import annotations

from enum import Enum


class Alliance(str, Enum):
    RED = "red"
    BLUE = "blue"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    MINOR = "minor"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.NONE: 0,
    Severity.MINOR: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


class ValidationStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FLAGGED = "flagged"
    FAILED = "failed"
    NO_TBA_DATA = "no-tba-data"
    NO_SCOUTING = "no-scouting"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def score(self) -> int:
        return _CONFIDENCE_SCORE[self]


_CONFIDENCE_SCORE = {
    ConfidenceLevel.HIGH: 3,
    ConfidenceLevel.MEDIUM: 2,
    ConfidenceLevel.LOW: 1,
}


class CompLevel(str, Enum):
    QUALIFICATION = "qm"
    SEMIFINAL = "sf"
    FINAL = "f"


class MappingType(str, Enum):
    COUNT = "count"
    BOOLEAN = "boolean"
    COUNT_MATCHING = "countMatching"
    COUNT_MATCHING_ANY = "countMatchingAny"


class FieldKind(str, Enum):
    ACTION = "action"
    TOGGLE = "toggle"


class GamePhase(str, Enum):
    AUTO = "auto"
    TELEOP = "teleop"
    ENDGAME = "endgame"


class ProgressPhase(str, Enum):
    FETCHING_TBA = "fetching-tba"
    LOADING_SCOUTING = "loading-scouting"
    VALIDATING = "validating"
    STORING = "storing"


# ── Match list filters ──────────────────────────────────────────────────
class StatusFilter(str, Enum):
    ALL = "all"
    PASSED = "passed"
    FLAGGED = "flagged"
    FAILED = "failed"
    PENDING = "pending"
    NO_TBA_DATA = "no-tba-data"
    NO_SCOUTING = "no-scouting"


class MatchTypeFilter(str, Enum):
    ALL = "all"
    QUALIFICATION = "qm"
    SEMIFINAL = "sf"
    FINAL = "f"


class ScoutingStatusFilter(str, Enum):
    ALL = "all"
    COMPLETE = "complete"
    PARTIAL = "partial"
    NONE = "none"


class SortBy(str, Enum):
    MATCH = "match"
    STATUS = "status"
    DISCREPANCIES = "discrepancies"
    CONFIDENCE = "confidence"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
