from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from core.config import Settings
from core.models import ActivityLog, ActivityLogEntry
from core.normalization import iso_utc_now


def build_entry(found: int, settings: Settings, now: Optional[datetime] = None) -> ActivityLogEntry:
    return {
        "action": settings.activity_log_action,
        "detail": f"{settings.set_by}: {found} resultat sparade",
        "player": settings.activity_log_player,
        "timestamp": iso_utc_now(now),
    }


def append_entry(log: Any, entry: ActivityLogEntry, max_entries: int) -> ActivityLog:
    """
    Ritorna un nuovo log con entry in coda, mantenendo al più max_entries
    elementi (i più recenti). Input non-lista -> trattato come log vuoto.
    """
    base: List[Any] = list(log) if isinstance(log, list) else []
    base.append(entry)
    excess = len(base) - max(1, max_entries)
    if excess > 0:
        base = base[excess:]
    return base  # type: ignore[return-value]


__all__ = ["build_entry", "append_entry"]
