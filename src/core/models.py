from __future__ import annotations
from typing import TypedDict, Optional, List, Literal

Outcome = Literal["1", "2", "X"]

OUTCOME_HOME: Outcome = "1"
OUTCOME_AWAY: Outcome = "2"
OUTCOME_DRAW: Outcome = "X"


class MatchRecord(TypedDict, total=False):
    homeTeam: str
    awayTeam: str
    date: str                   # ISO 8601, kickoff
    actualOutcome: Optional[Outcome]
    actualScore: Optional[str]    # "H-A"
    setBy: Optional[str]
    setAt: Optional[str]        # ISO 8601


class ActivityLogEntry(TypedDict):
    action: str
    detail: str
    player: str
    timestamp: str


class FinishedResult(TypedDict):
    home_goals: int
    away_goals: int
    outcome: Outcome
    score: str


# Firebase restituisce "buchi" null negli array: li conserviamo
MatchDataset = List[Optional[MatchRecord]]
ActivityLog = List[ActivityLogEntry]
