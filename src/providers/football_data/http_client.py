from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from core.config import get_settings
from core.logging import get_logger
from .exceptions import FootballDataAPIError, RateLimitError

log = get_logger(__name__)


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class FootballDataClient:
    """
    Client HTTP minimale per football-data.org v4.

    Non fa retry: il 429 viene segnalato con RateLimitError e la politica di
    attesa/riprova è decisa dal chiamante. Errori di rete (requests.RequestException)
    vengono propagati così come sono.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.football_data_api_key
        self.base_url = (base_url or settings.football_data_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "X-Auth-Token": self.api_key,
                "Accept": "application/json",
            }
        )

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        log.debug("football_data GET %s params=%s", path, params)
        resp = self._session.get(url, params=params or {}, timeout=self.timeout)

        if resp.status_code == 429:
            raise RateLimitError(
                f"Rate limit football-data.org (429) path={path}",
                retry_after=_parse_retry_after(resp.headers.get("Retry-After")),
            )
        if not 200 <= resp.status_code < 300:
            raise FootballDataAPIError(
                f"Richiesta API fallita (status={resp.status_code}) path={path}: {resp.text[:300]}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise FootballDataAPIError(
                f"Risposta non valida (non JSON) status={resp.status_code}",
                status_code=resp.status_code,
            ) from e
        if not isinstance(data, dict):
            raise FootballDataAPIError(
                f"Struttura inattesa (attesa mappa JSON) path={path}",
                status_code=resp.status_code,
            )
        return data

    def close(self) -> None:
        self._session.close()
