from __future__ import annotations

import sys

from dotenv import find_dotenv, load_dotenv

from core.config import get_settings
from core.logging import get_logger
from core.metrics import write_metrics_snapshot
from core.normalization import iso_utc_now
from monitoring.prometheus_exporter import update_run_metrics
from providers.football_data.results_provider import FootballDataResultsProvider
from reconcile.pipeline import ReconcileSummary, run_reconciliation
from store.exceptions import StoreReadError, StoreWriteError
from store.firebase_client import FirebaseStore

log = get_logger("reconcile.runner")


def _load_env() -> None:
    # Carica .env (override=False: le variabili del runner CI hanno precedenza)
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)


def _publish(summary: ReconcileSummary) -> None:
    payload = summary.to_dict()
    # export indipendenti, ognuno con il proprio guard
    try:
        write_metrics_snapshot(payload)
    except OSError as e:
        log.warning("snapshot metriche fallito: %s", e)
    try:
        update_run_metrics(payload)
    except OSError as e:
        log.warning("export textfile Prometheus fallito: %s", e)


def main() -> int:
    """
    Entry point del job:
      0 -> run completato (anche senza nuovi risultati)
      1 -> config mancante, lettura o scrittura store fallita, errore fatale
    """
    _load_env()
    log.info("=== Copa results auto-fetch %s ===", iso_utc_now())

    try:
        settings = get_settings()
    except ValueError as e:
        log.error("configurazione non valida: %s", e)
        return 1

    store = FirebaseStore()
    provider = FootballDataResultsProvider()
    try:
        summary = run_reconciliation(store, provider, settings=settings)
    except StoreReadError as e:
        log.error("Store read failed: %s", e, extra={"status_code": e.status_code})
        return 1
    except StoreWriteError as e:
        log.error("Store write failed: %s", e, extra={"status_code": e.status_code})
        return 1
    except Exception:
        log.exception("Fatal error")
        return 1
    finally:
        store.close()
        provider.close()

    log.info("reconcile_done", extra={"run_summary": summary.to_dict()})
    _publish(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
