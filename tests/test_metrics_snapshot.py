import json

from core.config import _reset_settings_cache_for_tests
from core.metrics import write_metrics_snapshot


def test_write_metrics_snapshot(tmp_path):
    payload = {"checked": 2, "found": 1, "saved": True}
    out = write_metrics_snapshot(payload)
    assert out == tmp_path / "metrics" / "last_run.json"
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["found"] == 1


def test_disable_metrics_file(monkeypatch):
    monkeypatch.setenv("ENABLE_METRICS_FILE", "false")
    _reset_settings_cache_for_tests()
    out = write_metrics_snapshot({"found": 0})
    assert not out.exists()
