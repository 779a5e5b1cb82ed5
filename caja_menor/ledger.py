"""Ledger store: the ordered movement history and its persistence.

The store owns one :class:`~caja_menor.models.LedgerState` and writes it to
the injected storage backend after every mutation. Totals are never stored;
see :mod:`caja_menor.balance`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from .config import INITIAL_FUND, TIMESTAMP_FORMAT
from .errors import NotFoundError, PersistenceError, ValidationError
from .models import LedgerState, MovementDraft, MovementRecord
from .storage import StorageBackend

logger = logging.getLogger(__name__)

INITIAL_FUND_KEY = "initialFund"
MOVEMENTS_KEY = "movements"


class LedgerStore:
    """Load, append, edit and delete movements of a single ledger."""

    keys = (INITIAL_FUND_KEY, MOVEMENTS_KEY)

    def __init__(
        self,
        storage: StorageBackend,
        initial_fund: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store and hydrate it from ``storage``.

        Args:
            storage: Backend holding the persisted keys.
            initial_fund: Fund used when nothing has been persisted yet.
                Defaults to INITIAL_FUND from config.
            clock: Returns the current time; used for ids and timestamps.
        """
        self.storage = storage
        self.default_fund = INITIAL_FUND if initial_fund is None else initial_fund
        self.clock = clock or datetime.now
        self.last_error: Optional[PersistenceError] = None
        self.state = self.load()

    def _fresh_state(self) -> LedgerState:
        return LedgerState(initial_fund=self.default_fund)

    def load(self) -> LedgerState:
        """Read persisted state, falling back to an empty ledger.

        Never raises: unreadable or malformed data is logged and replaced by
        a fresh state with the default fund.
        """
        try:
            fund = self.storage.get(INITIAL_FUND_KEY)
            movements = self.storage.get(MOVEMENTS_KEY)
            if fund is None and movements is None:
                state = self._fresh_state()
            else:
                state = LedgerState.from_payload(
                    self.default_fund if fund is None else fund,
                    [] if movements is None else movements,
                )
        except PersistenceError as exc:
            logger.warning("Discarding unreadable ledger state: %s", exc)
            self.last_error = exc
            state = self._fresh_state()
        self.state = state
        return state

    def save(self) -> bool:
        """Persist the current state. Returns ``False`` if the write failed."""
        try:
            self.storage.set_many(self.state.to_payload())
        except PersistenceError as exc:
            logger.warning("Ledger changes kept in memory only: %s", exc)
            self.last_error = exc
            return False
        self.last_error = None
        return True

    def _next_id(self, now: datetime) -> int:
        latest = max((m.id for m in self.state.movements), default=0)
        return max(int(now.timestamp() * 1000), latest + 1)

    def get(self, record_id: int) -> MovementRecord:
        idx = self.state.find(record_id)
        if idx is None:
            raise NotFoundError(record_id)
        return self.state.movements[idx]

    def append(self, draft: MovementDraft) -> MovementRecord:
        now = self.clock()
        record = MovementRecord(
            id=self._next_id(now),
            timestamp=now.strftime(TIMESTAMP_FORMAT),
            kind=draft.kind,
            category=draft.category,
            description=draft.description.strip(),
            amount=draft.amount,
        )
        self.state.movements.insert(0, record)
        logger.info("Recorded %s %s of %s", record.kind.value, record.category.value, record.amount)
        self.save()
        return record

    def update(self, record_id: int, description: Optional[str] = None, amount: Optional[int] = None) -> MovementRecord:
        idx = self.state.find(record_id)
        if idx is None:
            raise NotFoundError(record_id)
        updated = self.state.movements[idx].with_changes(description=description, amount=amount)
        self.state.movements[idx] = updated
        logger.info("Updated movement %s", record_id)
        self.save()
        return updated

    def remove(self, record_id: int) -> None:
        idx = self.state.find(record_id)
        if idx is None:
            raise NotFoundError(record_id)
        del self.state.movements[idx]
        logger.info("Removed movement %s", record_id)
        self.save()

    def remove_oldest(self, n: int) -> int:
        """Drop up to ``n`` movements from the oldest end; returns how many."""
        if n < 0:
            raise ValidationError("La cantidad a eliminar no puede ser negativa")
        count = min(n, len(self.state.movements))
        if count == 0:
            return 0
        del self.state.movements[-count:]
        logger.info("Removed %s oldest movements", count)
        self.save()
        return count

    def set_initial_fund(self, amount: int) -> None:
        if self.state.movements:
            raise ValidationError("El fondo inicial solo se puede fijar antes del primer movimiento")
        if amount < 0:
            raise ValidationError("El fondo inicial no puede ser negativo")
        self.state.initial_fund = amount
        self.save()

    def reset(self) -> None:
        """Clear every movement and erase the persisted keys."""
        self.state = LedgerState(initial_fund=self.state.initial_fund)
        try:
            self.storage.delete(*self.keys)
        except PersistenceError as exc:
            logger.warning("Could not erase persisted ledger: %s", exc)
            self.last_error = exc
            return
        self.last_error = None
        logger.info("Ledger reset")
