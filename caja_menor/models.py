"""Data models used by the petty-cash ledger."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping

from .config import TIMESTAMP_FORMAT
from .errors import PersistenceError, ValidationError


class MovementKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(str, Enum):
    """Origin of a movement.

    ``REGISTRO`` is used by the simple ledger; the others belong to the
    categorized cash box.
    """

    BILLETES = "billetes"
    MONEDAS = "monedas"
    ENCOMIENDAS = "encomiendas"
    FACTURAS = "facturas"
    VALES = "vales"
    REGISTRO = "registro"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: Dict[Category, str] = {
    Category.BILLETES: "Billetes",
    Category.MONEDAS: "Monedas",
    Category.ENCOMIENDAS: "Encomiendas",
    Category.FACTURAS: "Factura",
    Category.VALES: "Vale",
    Category.REGISTRO: "Registro",
}

CATEGORY_KINDS: Dict[Category, MovementKind] = {
    Category.BILLETES: MovementKind.INCOME,
    Category.MONEDAS: MovementKind.INCOME,
    Category.ENCOMIENDAS: MovementKind.INCOME,
    Category.FACTURAS: MovementKind.EXPENSE,
    Category.VALES: MovementKind.EXPENSE,
}


def _check_fields(description: str, amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError("El valor debe ser un número entero de pesos")
    if amount <= 0:
        raise ValidationError("El valor debe ser mayor que cero")
    if not description or not description.strip():
        raise ValidationError("La descripción es obligatoria")


def _check_kind(category: Category, kind: MovementKind) -> None:
    expected = CATEGORY_KINDS.get(category)
    if expected is not None and expected is not kind:
        raise ValidationError(f"La categoría {category.value} solo admite {expected.value}")


@dataclass(frozen=True)
class MovementDraft:
    """A validated movement that has not been stored yet."""

    kind: MovementKind
    category: Category
    description: str
    amount: int

    def __post_init__(self) -> None:
        _check_fields(self.description, self.amount)
        _check_kind(self.category, self.kind)


@dataclass(frozen=True)
class MovementRecord:
    """A stored movement. ``id`` and ``timestamp`` never change."""

    id: int
    timestamp: str
    kind: MovementKind
    category: Category
    description: str
    amount: int

    def __post_init__(self) -> None:
        _check_fields(self.description, self.amount)
        _check_kind(self.category, self.kind)

    @property
    def is_income(self) -> bool:
        return self.kind is MovementKind.INCOME

    @property
    def signed_amount(self) -> int:
        return self.amount if self.is_income else -self.amount

    def with_changes(self, description: str | None = None, amount: int | None = None) -> "MovementRecord":
        return replace(
            self,
            description=self.description if description is None else description.strip(),
            amount=self.amount if amount is None else amount,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "category": self.category.value,
            "description": self.description,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MovementRecord":
        try:
            timestamp = str(data["timestamp"])
            datetime.strptime(timestamp, TIMESTAMP_FORMAT)
            return cls(
                id=int(data["id"]),
                timestamp=timestamp,
                kind=MovementKind(data["kind"]),
                category=Category(data["category"]),
                description=str(data["description"]),
                amount=data["amount"],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Invalid movement record: {exc}") from exc


@dataclass
class LedgerState:
    """In-memory ledger. ``movements`` is kept newest first."""

    initial_fund: int
    movements: List[MovementRecord] = field(default_factory=list)

    @property
    def running_total(self) -> int:
        return sum(m.signed_amount for m in self.movements)

    @property
    def current_balance(self) -> int:
        return self.initial_fund + self.running_total

    def find(self, record_id: int) -> int | None:
        """Return the list index of ``record_id`` or ``None``."""
        for idx, movement in enumerate(self.movements):
            if movement.id == record_id:
                return idx
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "initialFund": self.initial_fund,
            "movements": [m.to_dict() for m in self.movements],
        }

    @classmethod
    def from_payload(cls, initial_fund: Any, movements: Any) -> "LedgerState":
        if not isinstance(initial_fund, int) or isinstance(initial_fund, bool) or initial_fund < 0:
            raise PersistenceError(f"Invalid initialFund: {initial_fund!r}")
        if not isinstance(movements, list):
            raise PersistenceError("movements must be a list")
        records: List[MovementRecord] = []
        for index, item in enumerate(movements):
            if not isinstance(item, dict):
                raise PersistenceError(f"Movement at index {index} is not an object")
            records.append(MovementRecord.from_dict(item))
        ids = [r.id for r in records]
        if len(set(ids)) != len(ids):
            raise PersistenceError("Duplicate movement ids")
        return cls(initial_fund=initial_fund, movements=records)
