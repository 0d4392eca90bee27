import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_STORE_URL = "https://krokens-copa-default-rtdb.europe-west1.firebasedatabase.app"
DEFAULT_FOOTBALL_DATA_BASE_URL = "https://api.football-data.org/v4"


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    v = value.strip().lower()
    if v in {"0", "false", "no"}:
        return False
    return True


def _clean(value: str) -> str:
    # chiavi copiate da .env a volte arrivano con apici o BOM
    return value.strip().strip("'\"").replace("\ufeff", "")


@dataclass
class Settings:
    football_data_api_key: str
    football_data_base_url: str
    results_competition: str

    store_url: str

    grace_minutes: int
    requests_per_minute: int
    rate_limit_wait: float
    max_rate_limit_retries: int
    http_timeout: float

    set_by: str
    activity_log_action: str
    activity_log_player: str
    activity_log_max: int

    log_level: str
    data_dir: str

    enable_metrics_file: bool
    metrics_dir: str

    enable_prometheus_textfile: bool
    prometheus_textfile_path: str

    @classmethod
    def from_env(cls) -> "Settings":
        key = _clean(os.getenv("FOOTBALL_DATA_API_KEY") or "")
        if not key:
            raise ValueError(
                "FOOTBALL_DATA_API_KEY non impostata. Aggiungi a .env: FOOTBALL_DATA_API_KEY=LA_TUA_CHIAVE"
            )

        def _int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un intero (valore: {raw!r})") from e

        def _float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un numero (valore: {raw!r})") from e

        base_url = (os.getenv("FOOTBALL_DATA_BASE_URL") or DEFAULT_FOOTBALL_DATA_BASE_URL).rstrip("/")
        competition = (os.getenv("RESULTS_COMPETITION") or "PL").strip().upper()
        store_url = (os.getenv("COPA_STORE_URL") or DEFAULT_STORE_URL).rstrip("/")

        grace_minutes = max(0, _int("RESULTS_GRACE_MINUTES", 100))
        requests_per_minute = _int("RESULTS_REQUESTS_PER_MINUTE", 10)
        if requests_per_minute < 1:
            requests_per_minute = 10
        rate_limit_wait = max(0.0, _float("RESULTS_RATE_LIMIT_WAIT", 60.0))
        # 0 = nessun limite (comportamento storico)
        max_rate_limit_retries = max(0, _int("RESULTS_MAX_RATE_LIMIT_RETRIES", 0))
        http_timeout = _float("HTTP_TIMEOUT", 20.0)
        if http_timeout <= 0:
            http_timeout = 20.0

        set_by = os.getenv("RESULTS_SET_BY") or "GitHub Actions"
        activity_log_action = os.getenv("ACTIVITY_LOG_ACTION") or "AUTO_RESULT_GITHUB"
        activity_log_player = os.getenv("ACTIVITY_LOG_PLAYER") or "System"
        activity_log_max = _int("ACTIVITY_LOG_MAX", 100)
        if activity_log_max < 1:
            activity_log_max = 100

        log_level = os.getenv("COPA_LOG_LEVEL", "INFO").upper()
        data_dir = os.getenv("COPA_DATA_DIR", "data")

        enable_metrics_file = _parse_bool(os.getenv("ENABLE_METRICS_FILE"), True)
        metrics_dir = os.getenv("METRICS_DIR", "metrics")

        enable_prometheus_textfile = _parse_bool(os.getenv("ENABLE_PROMETHEUS_TEXTFILE"), False)
        prometheus_textfile_path = os.getenv(
            "PROMETHEUS_TEXTFILE_PATH", os.path.join(metrics_dir, "copa_results.prom")
        )

        return cls(
            football_data_api_key=key,
            football_data_base_url=base_url,
            results_competition=competition,
            store_url=store_url,
            grace_minutes=grace_minutes,
            requests_per_minute=requests_per_minute,
            rate_limit_wait=rate_limit_wait,
            max_rate_limit_retries=max_rate_limit_retries,
            http_timeout=http_timeout,
            set_by=set_by,
            activity_log_action=activity_log_action,
            activity_log_player=activity_log_player,
            activity_log_max=activity_log_max,
            log_level=log_level,
            data_dir=data_dir,
            enable_metrics_file=enable_metrics_file,
            metrics_dir=metrics_dir,
            enable_prometheus_textfile=enable_prometheus_textfile,
            prometheus_textfile_path=prometheus_textfile_path,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def _reset_settings_cache_for_tests() -> None:
    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "_reset_settings_cache_for_tests"]
