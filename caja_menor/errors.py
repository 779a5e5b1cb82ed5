"""Exception types raised by the ledger core."""

from __future__ import annotations


class CajaMenorError(Exception):
    """Base class for every error raised by :mod:`caja_menor`."""


class ValidationError(CajaMenorError, ValueError):
    """User input failed a precondition; the submission must be discarded."""


class NotFoundError(CajaMenorError, KeyError):
    """An update or removal referenced an id that is not in the ledger."""

    def __init__(self, record_id: int):
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"Movement {self.record_id} not found"


class PersistenceError(CajaMenorError, OSError):
    """Reading or writing persisted state failed."""
