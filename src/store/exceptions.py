from typing import Optional


class StoreReadError(Exception):
    """Sollevata quando la collezione partite non può essere letta dallo store."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StoreWriteError(Exception):
    """Sollevata quando una PUT verso lo store fallisce (status non 2xx o errore di rete)."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
