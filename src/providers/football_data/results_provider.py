from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from core.config import get_settings
from core.models import FinishedResult
from core.normalization import extract_result, game_matches
from .http_client import FootballDataClient

REASON_NOT_FOUND = "not_found"


class FootballDataResultsProvider:
    """Lookup dei risultati finali di una competizione football-data.org per data."""

    def __init__(
        self,
        client: Optional[FootballDataClient] = None,
        competition: Optional[str] = None,
    ) -> None:
        self.client = client or FootballDataClient()
        self.competition = competition or get_settings().results_competition

    def fetch_matches_on(self, day: str) -> List[Dict[str, Any]]:
        """
        Tutte le partite della competizione in una data (YYYY-MM-DD).
        RateLimitError / FootballDataAPIError propagate al chiamante.
        """
        params = {"dateFrom": day, "dateTo": day}
        data = self.client.get(f"/competitions/{self.competition}/matches", params=params)
        matches = data.get("matches") or []
        return [m for m in matches if isinstance(m, dict)]

    @staticmethod
    def find_game(match: Dict[str, Any], games: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return next((g for g in games if game_matches(match, g)), None)

    def lookup(
        self, match: Dict[str, Any], games: List[Dict[str, Any]]
    ) -> Tuple[Optional[FinishedResult], Optional[str], Optional[Dict[str, Any]]]:
        """
        Ritorna (result, reason, game):
          - result valorizzato se la partita è conclusa con punteggio
          - reason in {not_found, not_finished, no_score} altrimenti
        """
        game = self.find_game(match, games)
        if game is None:
            return None, REASON_NOT_FOUND, None
        result, reason = extract_result(game)
        return result, reason, game

    def close(self) -> None:
        self.client.close()


__all__ = ["FootballDataResultsProvider", "REASON_NOT_FOUND"]
