from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

from core.config import get_settings
from core.models import ActivityLog, MatchDataset
from .exceptions import StoreReadError, StoreWriteError

LOGGER = logging.getLogger(__name__)

MATCHES_PATH = "matches.json"
ACTIVITY_LOG_PATH = "activityLog.json"


class FirebaseStore:
    """
    Accesso REST al Realtime Database Firebase (GET/PUT di interi nodi JSON).

    - load_matches: None se il nodo è assente o non è una lista
    - save_matches: sostituzione completa della lista
    - load_activity_log / save_activity_log: log attività (best-effort in lettura)
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.store_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def _put(self, path: str, payload: Any) -> None:
        try:
            resp = self._session.put(self._url(path), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreWriteError(f"Scrittura {path} fallita: {e}") from e
        if not 200 <= resp.status_code < 300:
            body = resp.text or ""
            raise StoreWriteError(
                f"Scrittura {path} fallita: {resp.status_code} - {body[:300]}",
                status_code=resp.status_code,
                body=body,
            )

    # -----------------------------------------------------------------------
    # Matches
    # -----------------------------------------------------------------------

    def load_matches(self) -> Optional[MatchDataset]:
        try:
            resp = self._session.get(self._url(MATCHES_PATH), timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreReadError(f"Lettura {MATCHES_PATH} fallita: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise StoreReadError(
                f"Lettura {MATCHES_PATH} fallita: {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            raw = resp.json()
        except ValueError:
            LOGGER.warning("Invalid / corrupt matches JSON from store")
            return None
        if not isinstance(raw, list):
            if raw is not None:
                LOGGER.warning("Invalid structure in matches JSON (expected list)")
            return None
        return raw

    def save_matches(self, matches: MatchDataset) -> None:
        self._put(MATCHES_PATH, matches)

    # -----------------------------------------------------------------------
    # Activity log
    # -----------------------------------------------------------------------

    def load_activity_log(self) -> ActivityLog:
        """Log attuale; lettura fallita o struttura non valida -> lista vuota."""
        try:
            resp = self._session.get(self._url(ACTIVITY_LOG_PATH), timeout=self.timeout)
        except requests.RequestException as e:
            LOGGER.warning("Lettura %s fallita: %s", ACTIVITY_LOG_PATH, e)
            return []
        if not 200 <= resp.status_code < 300:
            LOGGER.warning("Lettura %s fallita: %s", ACTIVITY_LOG_PATH, resp.status_code)
            return []
        try:
            raw = resp.json()
        except ValueError:
            LOGGER.warning("Invalid / corrupt activity log JSON from store")
            return []
        if not isinstance(raw, list):
            return []
        out: List[Any] = list(raw)
        return out  # type: ignore[return-value]

    def save_activity_log(self, entries: ActivityLog) -> None:
        self._put(ACTIVITY_LOG_PATH, entries)

    def close(self) -> None:
        self._session.close()


__all__ = ["FirebaseStore", "MATCHES_PATH", "ACTIVITY_LOG_PATH"]
