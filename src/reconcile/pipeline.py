from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import requests

from core.activity_log import append_entry, build_entry
from core.config import Settings, get_settings
from core.logging import get_logger
from core.models import ActivityLog, FinishedResult, MatchDataset
from core.normalization import (
    REASON_NO_SCORE,
    REASON_NOT_FINISHED,
    calendar_date,
    iso_utc_now,
    minutes_since,
    parse_kickoff,
)
from core.rate_limit import TokenBucket
from providers.football_data.exceptions import FootballDataAPIError, RateLimitError
from providers.football_data.results_provider import REASON_NOT_FOUND
from store.exceptions import StoreWriteError

logger = get_logger("reconcile.pipeline")


class MatchStoreProtocol(Protocol):
    def load_matches(self) -> Optional[MatchDataset]:
        ...

    def save_matches(self, matches: MatchDataset) -> None:
        ...

    def load_activity_log(self) -> ActivityLog:
        ...

    def save_activity_log(self, entries: ActivityLog) -> None:
        ...


class ResultsProviderProtocol(Protocol):
    def fetch_matches_on(self, day: str) -> List[Dict[str, Any]]:
        ...

    def lookup(
        self, match: Dict[str, Any], games: List[Dict[str, Any]]
    ) -> Tuple[Optional[FinishedResult], Optional[str], Optional[Dict[str, Any]]]:
        ...


@dataclass
class ReconcileSummary:
    total: int = 0
    checked: int = 0
    found: int = 0
    skipped_has_outcome: int = 0
    skipped_not_started: int = 0
    skipped_grace: int = 0
    skipped_invalid_date: int = 0
    not_found: int = 0
    not_finished: int = 0
    no_score: int = 0
    api_errors: int = 0
    rate_limit_hits: int = 0
    rate_limited: int = 0
    errors: int = 0
    saved: bool = False
    log_written: bool = False
    updated_indexes: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_SKIP_COUNTERS = {
    REASON_NOT_FOUND: "not_found",
    REASON_NOT_FINISHED: "not_finished",
    REASON_NO_SCORE: "no_score",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _label(match: Dict[str, Any]) -> str:
    return f"{match.get('homeTeam')} vs {match.get('awayTeam')}"


def _fetch_games(
    day: str,
    match: Dict[str, Any],
    provider: ResultsProviderProtocol,
    settings: Settings,
    limiter: TokenBucket,
    sleep: Callable[[float], None],
    summary: ReconcileSummary,
) -> Optional[List[Dict[str, Any]]]:
    """
    Interroga la fonte risultati per la data indicata.
    Su 429 attende RESULTS_RATE_LIMIT_WAIT (o Retry-After se maggiore) e ritenta
    la stessa partita; senza RESULTS_MAX_RATE_LIMIT_RETRIES il retry non ha limite.
    Ritorna None se la partita va saltata.
    """
    hits = 0
    while True:
        limiter.acquire()
        try:
            return provider.fetch_matches_on(day)
        except RateLimitError as e:
            hits += 1
            summary.rate_limit_hits += 1
            cap = settings.max_rate_limit_retries
            if cap and hits > cap:
                logger.warning(
                    "rate limit persistente dopo %s tentativi, skip %s",
                    hits,
                    _label(match),
                    extra={"match": _label(match), "reason": "rate_limited"},
                )
                summary.rate_limited += 1
                return None
            wait = max(settings.rate_limit_wait, e.retry_after or 0.0)
            logger.warning("rate limited, attendo %.0fs e ritento %s", wait, _label(match))
            sleep(wait)
        except FootballDataAPIError as e:
            logger.warning(
                "API error: %s",
                e.status_code,
                extra={"match": _label(match), "status_code": e.status_code},
            )
            summary.api_errors += 1
            return None


def _stage_result(
    match: Dict[str, Any], result: FinishedResult, settings: Settings, staged_at: datetime
) -> None:
    match["actualOutcome"] = result["outcome"]
    match["actualScore"] = result["score"]
    match["setBy"] = settings.set_by
    match["setAt"] = iso_utc_now(staged_at)


def _check_match(
    match: Dict[str, Any],
    provider: ResultsProviderProtocol,
    settings: Settings,
    limiter: TokenBucket,
    sleep: Callable[[float], None],
    summary: ReconcileSummary,
    utcnow: Callable[[], datetime],
) -> bool:
    day = calendar_date(match["date"])
    games = _fetch_games(day, match, provider, settings, limiter, sleep, summary)
    if games is None:
        return False

    result, reason, game = provider.lookup(match, games)
    if result is None:
        counter = _SKIP_COUNTERS.get(reason or "")
        if counter:
            setattr(summary, counter, getattr(summary, counter) + 1)
        if reason == REASON_NOT_FINISHED and game is not None:
            logger.info("%s: status %s", _label(match), game.get("status"), extra={"reason": reason})
        else:
            logger.info("%s: skip (%s)", _label(match), reason, extra={"reason": reason})
        return False

    _stage_result(match, result, settings, utcnow())
    logger.info(
        "%s %s %s -> %s",
        match.get("homeTeam"),
        result["score"],
        match.get("awayTeam"),
        result["outcome"],
        extra={"match": _label(match), "result": dict(result)},
    )
    return True


def _write_activity_log(
    store: MatchStoreProtocol, found: int, settings: Settings, now: datetime, summary: ReconcileSummary
) -> None:
    # best-effort: un errore qui non cambia l'esito del run
    try:
        current = store.load_activity_log()
        entries = append_entry(current, build_entry(found, settings, now), settings.activity_log_max)
        store.save_activity_log(entries)
        summary.log_written = True
    except (StoreWriteError, requests.RequestException) as e:
        logger.warning("scrittura activity log fallita: %s", e)


def run_reconciliation(
    store: MatchStoreProtocol,
    provider: ResultsProviderProtocol,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    limiter: Optional[TokenBucket] = None,
    sleep: Optional[Callable[[float], None]] = None,
    utcnow: Optional[Callable[[], datetime]] = None,
) -> ReconcileSummary:
    """
    Riconcilia le partite dello store con i risultati finali:

    1) legge la lista partite (StoreReadError -> propagata)
    2) per ogni partita senza esito e iniziata da almeno RESULTS_GRACE_MINUTES
       interroga la fonte risultati per la data del calcio d'inizio
    3) se trova il risultato finale lo applica in memoria (esito, punteggio, autore, timestamp)
       setAt è preso da utcnow() al momento dell'applicazione, now (default utcnow()) decide l'idoneità
    4) se almeno un esito è stato trovato riscrive l'intera lista (StoreWriteError -> propagata)
       e aggiunge una voce al log attività
    """
    settings = settings or get_settings()
    utcnow = utcnow or _utcnow
    now = now or utcnow()
    sleep = sleep or time.sleep
    limiter = limiter or TokenBucket(rpm=settings.requests_per_minute, burst=1, sleep=sleep)
    summary = ReconcileSummary()

    logger.info("reconcile_start %s", iso_utc_now(now))

    matches = store.load_matches()
    if matches is None:
        logger.info("No matches in database.")
        return summary

    summary.total = len(matches)

    for idx, match in enumerate(matches):
        if not isinstance(match, dict):
            continue
        if match.get("actualOutcome"):
            summary.skipped_has_outcome += 1
            continue

        kickoff = parse_kickoff(match.get("date"))
        if kickoff is None:
            logger.warning("%s: data non valida %r, skip", _label(match), match.get("date"))
            summary.skipped_invalid_date += 1
            continue
        if now < kickoff:
            summary.skipped_not_started += 1
            continue
        elapsed = minutes_since(kickoff, now)
        if elapsed < settings.grace_minutes:
            logger.info("%s: only %.0f min since start, skipping", _label(match), elapsed)
            summary.skipped_grace += 1
            continue

        summary.checked += 1
        logger.info("Checking: %s (%s)", _label(match), match.get("date"))
        try:
            if _check_match(match, provider, settings, limiter, sleep, summary, utcnow):
                summary.found += 1
                summary.updated_indexes.append(idx)
        except Exception as e:
            logger.exception("errore inatteso su %s: %s", _label(match), e)
            summary.errors += 1

    if summary.checked == 0:
        logger.info("No matches to check right now.")
        return summary

    if summary.found == 0:
        logger.info("Checked %s match(es) - no new results yet.", summary.checked)
        return summary

    store.save_matches(matches)
    summary.saved = True
    logger.info("Saved %s new result(s) to store.", summary.found)

    _write_activity_log(store, summary.found, settings, utcnow(), summary)
    return summary


__all__ = ["ReconcileSummary", "run_reconciliation"]
