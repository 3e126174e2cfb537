"""
Shared fixtures: a small game catalog in the season game-schema style, an
official match record for it, and scouted alliance data that agrees with it.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import pytest

from shared.models.domain import ScoutedAllianceData, ScoutingEntry, TBAMatch, ValidationConfig
from shared.models.enums import Alliance

from validation.catalog import FieldCatalog
from validation.engine import MatchValidator

FIXED_NOW = datetime(2026, 3, 14, 18, 30, tzinfo=timezone.utc)

ROBOTS = ("Robot1", "Robot2", "Robot3")

SAMPLE_SCHEMA: dict[str, Any] = {
    "categories": [
        {"key": "auto-scoring", "label": "Auto Scoring", "phase": "auto"},
        {"key": "teleop-scoring", "label": "Teleop Scoring", "phase": "teleop"},
        {"key": "endgame", "label": "Endgame", "phase": "endgame"},
    ],
    "actionMappings": {
        "autoFuelScored": {
            "tbaPath": "hubScore.autoCount", "type": "count", "category": "auto-scoring", "points": 1,
        },
        "teleopFuelScored": {
            "tbaPath": "hubScore.teleopCount", "type": "count", "category": "teleop-scoring", "points": 1,
        },
    },
    "toggleMappings": {
        "autoClimb": {
            "tbaPath": [f"autoTower{r}" for r in ROBOTS],
            "type": "countMatching", "matchValue": "Level1", "category": "auto-scoring",
        },
        "mobility": {
            "tbaPath": [f"autoLine{r}" for r in ROBOTS], "type": "boolean", "category": "auto-scoring",
        },
        "climbL3": {
            "tbaPath": [f"endGameTower{r}" for r in ROBOTS],
            "type": "countMatching", "matchValue": "Level3", "category": "endgame",
        },
        "climbAny": {
            "tbaPath": [f"endGameTower{r}" for r in ROBOTS],
            "type": "countMatchingAny", "matchValue": ["Level1", "Level2", "Level3"], "category": "endgame",
        },
    },
    "labels": {
        "autoFuelScored": "Auto Fuel Scored",
        "teleopFuelScored": "Teleop Fuel Scored",
        "autoClimb": "Auto Climb",
        "mobility": "Left Starting Line",
        "climbL3": "Level 3 Climb",
        "climbAny": "Climbed",
    },
}

RED_BREAKDOWN: dict[str, Any] = {
    "hubScore": {"autoCount": 10, "teleopCount": 40},
    "autoTowerRobot1": "Level1", "autoTowerRobot2": "None", "autoTowerRobot3": "Level1",
    "autoLineRobot1": "Yes", "autoLineRobot2": "Yes", "autoLineRobot3": "No",
    "endGameTowerRobot1": "Level3", "endGameTowerRobot2": "Level2", "endGameTowerRobot3": "None",
    "autoPoints": 20, "teleopPoints": 60, "foulPoints": 5, "foulCount": 1, "techFoulCount": 0,
}

BLUE_BREAKDOWN: dict[str, Any] = {
    "hubScore": {"autoCount": 6, "teleopCount": 30},
    "autoTowerRobot1": "None", "autoTowerRobot2": "None", "autoTowerRobot3": "None",
    "autoLineRobot1": "Yes", "autoLineRobot2": "Yes", "autoLineRobot3": "Yes",
    "endGameTowerRobot1": "Level1", "endGameTowerRobot2": "Level1", "endGameTowerRobot3": "Level3",
    "autoPoints": 12, "teleopPoints": 45, "foulPoints": 0, "foulCount": 0, "techFoulCount": 0,
}

# Values the catalog extracts from the breakdowns above
RED_ACTIONS = {"autoFuelScored": 10, "teleopFuelScored": 40}
RED_TOGGLES = {"autoClimb": 2, "mobility": 2, "climbL3": 1, "climbAny": 2}
BLUE_ACTIONS = {"autoFuelScored": 6, "teleopFuelScored": 30}
BLUE_TOGGLES = {"autoClimb": 0, "mobility": 3, "climbL3": 1, "climbAny": 3}

RED_TEAMS = ("100", "200", "300")
BLUE_TEAMS = ("400", "500", "600")

# Per-robot scouting that sums to the extracted values
RED_GAME_DATA: dict[str, dict[str, Any]] = {
    "100": {
        "auto": {"autoFuelScored": 4, "autoClimb": True, "mobility": True},
        "teleop": {"teleopFuelScored": 15},
        "endgame": {"climbL3": True, "climbAny": True},
    },
    "200": {
        "auto": {"autoFuelScored": 3, "autoClimb": False, "mobility": 1},
        "teleop": {"teleopFuelScoredCount": 10},
        "endgame": {"climbL3": False, "climbAny": 1},
    },
    "300": {
        "auto": {"autoFuelScored": 3, "autoClimb": True, "mobility": False},
        "teleop": {"teleopFuelScored": 15},
        "endgame": {"climbAny": False},
    },
}

BLUE_GAME_DATA: dict[str, dict[str, Any]] = {
    team: {
        "auto": {"autoFuelScored": 2, "autoClimb": False, "mobility": True},
        "teleop": {"teleopFuelScored": 10},
        "endgame": {"climbL3": team == "600", "climbAny": True},
    }
    for team in BLUE_TEAMS
}


def make_tba_match(
    key: str = "2026test_qm12",
    red_breakdown: Optional[dict[str, Any]] = None,
    blue_breakdown: Optional[dict[str, Any]] = None,
    red_score: int = 85,
    blue_score: int = 57,
    with_breakdown: bool = True,
) -> TBAMatch:
    event_key, _, _ = key.rpartition("_")
    return TBAMatch.model_validate({
        "key": key,
        "event_key": event_key,
        "comp_level": "qm",
        "match_number": 12,
        "alliances": {
            "red": {"score": red_score, "team_keys": [f"frc{t}" for t in RED_TEAMS]},
            "blue": {"score": blue_score, "team_keys": [f"frc{t}" for t in BLUE_TEAMS]},
        },
        "score_breakdown": {
            "red": red_breakdown if red_breakdown is not None else RED_BREAKDOWN,
            "blue": blue_breakdown if blue_breakdown is not None else BLUE_BREAKDOWN,
        } if with_breakdown else None,
        "time": 1773512400,
        "actual_time": 1773512460,
    })


def make_scouted(
    alliance: Alliance,
    actions: Optional[dict[str, Any]] = None,
    toggles: Optional[dict[str, Any]] = None,
    **overrides: Any,
) -> ScoutedAllianceData:
    red = alliance == Alliance.RED
    base_actions = dict(RED_ACTIONS if red else BLUE_ACTIONS)
    base_toggles = dict(RED_TOGGLES if red else BLUE_TOGGLES)
    base_actions.update(actions or {})
    base_toggles.update(toggles or {})
    return ScoutedAllianceData(
        alliance=alliance,
        match_key="2026test_qm12",
        teams=list(RED_TEAMS if red else BLUE_TEAMS),
        actions=base_actions,
        toggles=base_toggles,
        scouted_teams_count=3,
        **overrides,
    )


def make_entries(match_key: str = "2026test_qm12", match_number: int = 12) -> list[ScoutingEntry]:
    entries: list[ScoutingEntry] = []
    for alliance, data in ((Alliance.RED, RED_GAME_DATA), (Alliance.BLUE, BLUE_GAME_DATA)):
        for team, game_data in data.items():
            entries.append(ScoutingEntry(
                match_key=match_key,
                match_number=match_number,
                team_number=team,
                alliance=alliance,
                scout_name=f"scout-{team}",
                game_data=game_data,
            ))
    return entries


@pytest.fixture
def catalog() -> FieldCatalog:
    return FieldCatalog.from_dict(SAMPLE_SCHEMA)


@pytest.fixture
def config() -> ValidationConfig:
    return ValidationConfig()


@pytest.fixture
def tba_match() -> TBAMatch:
    return make_tba_match()


@pytest.fixture
def validator(catalog: FieldCatalog, config: ValidationConfig) -> MatchValidator:
    return MatchValidator(catalog, config, clock=lambda: FIXED_NOW)


@pytest.fixture
def scouted_factory() -> Callable[..., ScoutedAllianceData]:
    return make_scouted
