from typing import Optional


class RateLimitError(Exception):
    """Sollevata quando football-data.org risponde 429 (troppe richieste)."""

    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class FootballDataAPIError(Exception):
    """Sollevata per risposte non 2xx (diverse da 429) o corpo non JSON."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
