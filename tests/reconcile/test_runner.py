import json

import pytest

from core.config import _reset_settings_cache_for_tests
from reconcile import runner
from reconcile.pipeline import ReconcileSummary
from store.exceptions import StoreReadError, StoreWriteError


class Closable:
    closed = 0

    def __init__(self, *args, **kwargs):
        pass

    def close(self):
        Closable.closed += 1


@pytest.fixture
def wiring(monkeypatch):
    Closable.closed = 0
    monkeypatch.setattr(runner, "FirebaseStore", Closable)
    monkeypatch.setattr(runner, "FootballDataResultsProvider", Closable)
    monkeypatch.setattr(runner, "_load_env", lambda: None)
    outcome = {}

    def fake_run(store, provider, settings=None):
        if "raise" in outcome:
            raise outcome["raise"]
        return outcome.get("summary", ReconcileSummary())

    monkeypatch.setattr(runner, "run_reconciliation", fake_run)
    return outcome


def test_success_exit_zero_and_metrics(wiring, tmp_path):
    wiring["summary"] = ReconcileSummary(total=3, checked=1, found=1, saved=True)
    assert runner.main() == 0
    assert Closable.closed == 2
    data = json.loads((tmp_path / "metrics" / "last_run.json").read_text(encoding="utf-8"))
    assert data["found"] == 1
    assert data["saved"] is True


@pytest.mark.parametrize(
    "error",
    [
        StoreReadError("Lettura matches.json fallita: 500", status_code=500),
        StoreWriteError("Scrittura matches.json fallita: 500", status_code=500),
        RuntimeError("boom"),
    ],
)
def test_fatal_errors_exit_one(wiring, error):
    wiring["raise"] = error
    assert runner.main() == 1
    assert Closable.closed == 2


def test_missing_key_exit_one(wiring, monkeypatch):
    monkeypatch.delenv("FOOTBALL_DATA_API_KEY", raising=False)
    _reset_settings_cache_for_tests()
    assert runner.main() == 1
    assert Closable.closed == 0


def test_prometheus_textfile_written(wiring, monkeypatch, tmp_path):
    monkeypatch.setenv("ENABLE_PROMETHEUS_TEXTFILE", "1")
    _reset_settings_cache_for_tests()
    wiring["summary"] = ReconcileSummary(total=1, checked=1)
    assert runner.main() == 0
    prom = tmp_path / "metrics" / "copa_results.prom"
    assert prom.exists()
    assert "copa_results_checked" in prom.read_text(encoding="utf-8")


def test_snapshot_failure_does_not_block_textfile(wiring, monkeypatch, tmp_path):
    monkeypatch.setenv("ENABLE_PROMETHEUS_TEXTFILE", "1")
    _reset_settings_cache_for_tests()

    def broken_snapshot(payload):
        raise OSError("disk full")

    monkeypatch.setattr(runner, "write_metrics_snapshot", broken_snapshot)
    wiring["summary"] = ReconcileSummary(total=2, checked=2, found=1, saved=True)
    assert runner.main() == 0
    prom = tmp_path / "metrics" / "copa_results.prom"
    assert "copa_results_found 1.0" in prom.read_text(encoding="utf-8")


def test_textfile_failure_does_not_block_snapshot(wiring, monkeypatch, tmp_path):
    def broken_textfile(payload):
        raise OSError("read-only")

    monkeypatch.setattr(runner, "update_run_metrics", broken_textfile)
    wiring["summary"] = ReconcileSummary(total=2, checked=2, found=1, saved=True)
    assert runner.main() == 0
    data = json.loads((tmp_path / "metrics" / "last_run.json").read_text(encoding="utf-8"))
    assert data["found"] == 1
