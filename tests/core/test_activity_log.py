from datetime import datetime, timezone

from core.activity_log import append_entry, build_entry
from core.config import get_settings


def _entry(i):
    return {"action": "A", "detail": str(i), "player": "p", "timestamp": "t"}


def test_build_entry_defaults():
    now = datetime(2025, 8, 16, 18, 0, tzinfo=timezone.utc)
    entry = build_entry(2, get_settings(), now)
    assert entry == {
        "action": "AUTO_RESULT_GITHUB",
        "detail": "GitHub Actions: 2 resultat sparade",
        "player": "System",
        "timestamp": "2025-08-16T18:00:00.000Z",
    }


def test_append_keeps_last_entries():
    log = [_entry(i) for i in range(100)]
    out = append_entry(log, _entry(100), 100)
    assert len(out) == 100
    assert out[0]["detail"] == "1"
    assert out[-1]["detail"] == "100"
    # input non modificato
    assert len(log) == 100


def test_append_truncates_oversized_log():
    log = [_entry(i) for i in range(250)]
    out = append_entry(log, _entry(250), 100)
    assert len(out) == 100
    assert out[-1]["detail"] == "250"


def test_append_to_non_list_starts_fresh():
    out = append_entry({"weird": True}, _entry(0), 100)
    assert out == [_entry(0)]
    assert append_entry(None, _entry(1), 100) == [_entry(1)]
