from core.config import _reset_settings_cache_for_tests
from monitoring.prometheus_exporter import update_run_metrics


SUMMARY = {
    "total": 12,
    "checked": 3,
    "found": 2,
    "skipped_has_outcome": 8,
    "skipped_grace": 1,
    "not_found": 1,
    "rate_limit_hits": 1,
    "api_errors": 0,
    "errors": 0,
    "saved": True,
}


def test_textfile_disabled_by_default(tmp_path):
    assert update_run_metrics(SUMMARY) is None
    assert not (tmp_path / "metrics").exists()


def test_textfile_contains_run_gauges(tmp_path):
    target = update_run_metrics(SUMMARY, textfile=str(tmp_path / "job.prom"))
    output = target.read_text(encoding="utf-8")
    assert "copa_results_found 2.0" in output
    assert "copa_results_matches_total 12.0" in output
    assert 'copa_results_skipped{reason="skipped_has_outcome"} 8.0' in output
    assert "copa_results_saved 1.0" in output
    assert "copa_results_last_run_timestamp_seconds" in output


def test_textfile_has_no_cumulative_run_counter(tmp_path):
    target = tmp_path / "job.prom"
    update_run_metrics(SUMMARY, textfile=str(target))
    update_run_metrics(SUMMARY, textfile=str(target))
    assert "copa_results_runs_total" not in target.read_text(encoding="utf-8")


def test_textfile_export_enabled(monkeypatch, tmp_path):
    monkeypatch.setenv("ENABLE_PROMETHEUS_TEXTFILE", "true")
    _reset_settings_cache_for_tests()
    target = update_run_metrics(SUMMARY)
    assert target == tmp_path / "metrics" / "copa_results.prom"
    assert "copa_results_checked 3.0" in target.read_text(encoding="utf-8")


def test_textfile_explicit_path(tmp_path):
    target = update_run_metrics(SUMMARY, textfile=str(tmp_path / "out" / "job.prom"))
    assert target.exists()
