from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from core.models import FinishedResult, Outcome, OUTCOME_AWAY, OUTCOME_DRAW, OUTCOME_HOME


FINISHED_STATUS = "FINISHED"

# motivi di skip restituiti da extract_result
REASON_NOT_FINISHED = "not_finished"
REASON_NO_SCORE = "no_score"


def parse_kickoff(value: Any) -> Optional[datetime]:
    """
    Converte il campo 'date' di un match in datetime UTC aware.
    Accetta suffisso Z, offset espliciti o valori naive (assunti UTC).
    Ritorna None se il valore non è interpretabile.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def calendar_date(value: str) -> str:
    # parte data della stringa così come salvata (YYYY-MM-DD), separatore T o spazio
    return value.strip()[:10]


def minutes_since(kickoff: datetime, now: datetime) -> float:
    return (now - kickoff).total_seconds() / 60.0


def _overlap(a: str, b: str) -> bool:
    return a in b or b in a


def team_names_match(local: str, external: str) -> bool:
    """
    Confronto 'fuzzy' tra nome squadra locale e nome dell'API:
    basta che uno dei due (case-insensitive) contenga l'altro.
    Es: "Arsenal" vs "Arsenal FC" -> True.
    Un nome vuoto non combacia con nulla.
    """
    a = (local or "").strip().lower()
    b = (external or "").strip().lower()
    if not a or not b:
        return False
    return _overlap(a, b)


def external_team_name(team: Any) -> str:
    if not isinstance(team, dict):
        return ""
    return team.get("shortName") or team.get("name") or ""


def game_matches(match: Dict[str, Any], game: Dict[str, Any]) -> bool:
    return team_names_match(
        match.get("homeTeam") or "", external_team_name(game.get("homeTeam"))
    ) and team_names_match(
        match.get("awayTeam") or "", external_team_name(game.get("awayTeam"))
    )


def compute_outcome(home_goals: int, away_goals: int) -> Outcome:
    if home_goals > away_goals:
        return OUTCOME_HOME
    if home_goals < away_goals:
        return OUTCOME_AWAY
    return OUTCOME_DRAW


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (ValueError, TypeError):
        return None


def extract_result(game: Dict[str, Any]) -> Tuple[Optional[FinishedResult], Optional[str]]:
    """
    Estrae il risultato finale da un match football-data.org.

    Ritorna (result, None) se la partita è FINISHED e ha score.fullTime completo,
    altrimenti (None, motivo).
    """
    if game.get("status") != FINISHED_STATUS:
        return None, REASON_NOT_FINISHED
    full_time = ((game.get("score") or {}).get("fullTime") or {})
    home = _as_int(full_time.get("home"))
    away = _as_int(full_time.get("away"))
    if home is None or away is None:
        return None, REASON_NO_SCORE
    result: FinishedResult = {
        "home_goals": home,
        "away_goals": away,
        "outcome": compute_outcome(home, away),
        "score": f"{home}-{away}",
    }
    return result, None


def iso_utc_now(now: Optional[datetime] = None) -> str:
    # stesso formato di Date.toISOString(): millisecondi + Z
    dt = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


__all__ = [
    "parse_kickoff",
    "calendar_date",
    "minutes_since",
    "team_names_match",
    "external_team_name",
    "game_matches",
    "compute_outcome",
    "extract_result",
    "iso_utc_now",
    "REASON_NOT_FINISHED",
    "REASON_NO_SCORE",
]
