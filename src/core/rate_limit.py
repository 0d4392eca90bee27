from __future__ import annotations

import time
from typing import Callable, Optional

from core.logging import get_logger

logger = get_logger("core.rate_limit")


class TokenBucket:
    """
    Token bucket sincrono per il rate limit dell'API risultati.

    Ricarica rpm / 60 token al secondo, burst massimo = burst.
    Con rpm=10 e burst=1 la prima richiesta parte subito e le successive
    sono distanziate di 6 secondi (free tier football-data.org).

    clock e sleep sono iniettabili per i test.
    """

    def __init__(
        self,
        rpm: int,
        burst: int = 1,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._rpm = max(1, rpm)
        self._burst = max(1, burst)
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._tokens = float(self._burst)
        self._last_refill = self._clock()

    @property
    def interval(self) -> float:
        return 60.0 / self._rpm

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self._burst), self._tokens + elapsed * (self._rpm / 60.0))
        self._last_refill = now

    def try_acquire(self) -> bool:
        """Consuma un token se disponibile. True se la richiesta può partire."""
        self._refill()
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    def acquire(self) -> float:
        """
        Blocca finché un token è disponibile e lo consuma.
        Ritorna i secondi attesi (0 se il token era già disponibile).
        """
        if self.try_acquire():
            return 0.0
        wait = (1 - self._tokens) * self.interval
        logger.debug("rate limiter wait=%.2fs", wait)
        self._sleep(wait)
        # il token maturato durante l'attesa viene consumato subito
        self._tokens = 0.0
        self._last_refill = self._clock()
        return wait


__all__ = ["TokenBucket"]
