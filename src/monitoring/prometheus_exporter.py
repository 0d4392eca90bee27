from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Gauge, write_to_textfile
from core.config import get_settings
from core.logging import get_logger

logger = get_logger("monitoring.prometheus_exporter")

# Registry dedicato: il job è batch, le metriche vengono esportate via textfile collector.
_REGISTRY = CollectorRegistry()

MATCHES_TOTAL = Gauge("copa_results_matches_total", "Partite presenti nello store", registry=_REGISTRY)
CHECKED = Gauge("copa_results_checked", "Partite interrogate ultimo run", registry=_REGISTRY)
FOUND = Gauge("copa_results_found", "Risultati trovati ultimo run", registry=_REGISTRY)
SKIPPED = Gauge(
    "copa_results_skipped",
    "Partite saltate ultimo run per motivo",
    ["reason"],
    registry=_REGISTRY,
)
RATE_LIMIT_HITS = Gauge("copa_results_rate_limit_hits", "Risposte 429 ultimo run", registry=_REGISTRY)
ERRORS = Gauge("copa_results_errors", "Errori API/inattesi ultimo run", registry=_REGISTRY)
SAVED = Gauge("copa_results_saved", "1 se la lista partite è stata riscritta", registry=_REGISTRY)
LAST_RUN_TS = Gauge("copa_results_last_run_timestamp_seconds", "Timestamp ultimo run", registry=_REGISTRY)

_SKIP_KEYS = (
    "skipped_has_outcome",
    "skipped_not_started",
    "skipped_grace",
    "skipped_invalid_date",
    "not_found",
    "not_finished",
    "no_score",
    "rate_limited",
)


def update_run_metrics(summary: Dict[str, Any], textfile: Optional[str] = None) -> Optional[Path]:
    """
    Aggiorna le metriche dal riepilogo del run e, se abilitato
    (ENABLE_PROMETHEUS_TEXTFILE), le scrive nel file .prom.
    Ritorna il path scritto o None.
    """
    MATCHES_TOTAL.set(summary.get("total", 0) or 0)
    CHECKED.set(summary.get("checked", 0) or 0)
    FOUND.set(summary.get("found", 0) or 0)
    for key in _SKIP_KEYS:
        SKIPPED.labels(reason=key).set(summary.get(key, 0) or 0)
    RATE_LIMIT_HITS.set(summary.get("rate_limit_hits", 0) or 0)
    ERRORS.set((summary.get("api_errors", 0) or 0) + (summary.get("errors", 0) or 0))
    SAVED.set(1 if summary.get("saved") else 0)
    LAST_RUN_TS.set_to_current_time()

    settings = get_settings()
    if textfile is None and not settings.enable_prometheus_textfile:
        logger.debug("Textfile Prometheus disabilitato, skip export")
        return None

    target = Path(textfile) if textfile else Path(settings.data_dir) / settings.prometheus_textfile_path
    target.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(target), _REGISTRY)
    logger.debug("Prometheus textfile scritto in %s", target)
    return target


__all__ = ["update_run_metrics", "_REGISTRY"]
