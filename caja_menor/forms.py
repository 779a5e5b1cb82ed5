"""Form validation: raw user input to movement drafts.

All ``str -> int`` parsing happens here. Builders return a
:class:`~caja_menor.models.MovementDraft`, or ``None`` when the form holds
nothing to record (an empty count is a silent no-op, not an error). Nothing
in this module touches the ledger store.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Dict, Iterator, Optional, Sequence, Union

from .balance import check_expense
from .config import BILL_DENOMINATIONS, COIN_DENOMINATIONS, PARCEL_FEES, RECORD_CEILING
from .errors import ValidationError
from .formatting import format_pesos
from .models import Category, LedgerState, MovementDraft, MovementKind, MovementRecord

_NON_DIGITS = re.compile(r"[^0-9]")
_NEGATIVE = re.compile(r"^[^0-9]*-")

ENTRY_TYPES: Dict[str, MovementKind] = {
    "entrada": MovementKind.INCOME,
    "salida": MovementKind.EXPENSE,
}

RawNumber = Union[str, int, None]


def parse_amount(text: RawNumber) -> int:
    """Parse a peso amount typed by the user.

    Every non-digit is dropped, so ``"$ 50.000"`` reads as ``50000``.

    Raises:
        ValidationError: If no digits are left or the amount is negative.
    """
    if isinstance(text, int) and not isinstance(text, bool):
        if text < 0:
            raise ValidationError("El valor no puede ser negativo")
        return text
    text = text or ""
    if _NEGATIVE.match(text):
        raise ValidationError("El valor no puede ser negativo")
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        raise ValidationError("Por favor ingresa un valor válido")
    return int(digits)


def parse_count(text: RawNumber) -> int:
    """Parse a non-negative quantity. Blank input counts as zero."""
    if isinstance(text, int) and not isinstance(text, bool):
        value = text
    else:
        cleaned = (text or "").strip()
        if not cleaned:
            return 0
        if not cleaned.isascii() or not cleaned.isdigit():
            raise ValidationError(f"Cantidad inválida: {cleaned!r}")
        value = int(cleaned)
    if value < 0:
        raise ValidationError("La cantidad no puede ser negativa")
    return value


class DenominationCounts(Mapping):
    """Counts per denomination over a fixed set of denominations."""

    def __init__(self, denominations: Sequence[int], counts: Optional[Mapping[int, RawNumber]] = None):
        self.denominations = tuple(denominations)
        self._counts: Dict[int, int] = {d: 0 for d in self.denominations}
        for key, raw in (counts or {}).items():
            try:
                denomination = int(key)
            except (TypeError, ValueError):
                raise ValidationError(f"Denominación inválida: {key!r}") from None
            if denomination not in self._counts:
                raise ValidationError(f"Denominación no admitida: {format_pesos(denomination)}")
            self._counts[denomination] = parse_count(raw)

    def __getitem__(self, denomination: int) -> int:
        return self._counts[denomination]

    def __iter__(self) -> Iterator[int]:
        return iter(self.denominations)

    def __len__(self) -> int:
        return len(self.denominations)

    @property
    def total(self) -> int:
        return sum(d * c for d, c in self._counts.items())

    def describe(self) -> str:
        return ", ".join(
            f"{count} x {format_pesos(denomination)}"
            for denomination, count in self._counts.items()
            if count > 0
        )


def _denomination_draft(category: Category, counts: DenominationCounts) -> Optional[MovementDraft]:
    if counts.total == 0:
        return None
    return MovementDraft(
        kind=MovementKind.INCOME,
        category=category,
        description=f"{category.label}: {counts.describe()}",
        amount=counts.total,
    )


def bills_draft(counts: Mapping[int, RawNumber]) -> Optional[MovementDraft]:
    return _denomination_draft(Category.BILLETES, DenominationCounts(BILL_DENOMINATIONS, counts))


def coins_draft(counts: Mapping[int, RawNumber]) -> Optional[MovementDraft]:
    return _denomination_draft(Category.MONEDAS, DenominationCounts(COIN_DENOMINATIONS, counts))


def parcel_fee_draft(unit_price: RawNumber, quantity: RawNumber) -> Optional[MovementDraft]:
    unit = parse_amount(unit_price)
    if unit not in PARCEL_FEES:
        raise ValidationError(f"Tarifa de encomienda no admitida: {format_pesos(unit)}")
    count = parse_count(quantity)
    if count == 0:
        return None
    return MovementDraft(
        kind=MovementKind.INCOME,
        category=Category.ENCOMIENDAS,
        description=f"{Category.ENCOMIENDAS.label}: {count} x {format_pesos(unit)}",
        amount=unit * count,
    )


def _expense_draft(
    category: Category,
    state: LedgerState,
    concept: str,
    amount: RawNumber,
    ceiling: int,
) -> MovementDraft:
    concept = (concept or "").strip()
    if not concept:
        raise ValidationError("El concepto es obligatorio")
    value = parse_amount(amount)
    if value <= 0:
        raise ValidationError("El valor debe ser mayor que cero")
    check_expense(state, value, ceiling=ceiling)
    return MovementDraft(
        kind=MovementKind.EXPENSE,
        category=category,
        description=f"{category.label}: {concept}",
        amount=value,
    )


def invoice_draft(state: LedgerState, concept: str, amount: RawNumber, ceiling: int = RECORD_CEILING) -> MovementDraft:
    return _expense_draft(Category.FACTURAS, state, concept, amount, ceiling)


def voucher_draft(state: LedgerState, concept: str, amount: RawNumber, ceiling: int = RECORD_CEILING) -> MovementDraft:
    return _expense_draft(Category.VALES, state, concept, amount, ceiling)


def entry_draft(entry_type: str, concept: str, amount: RawNumber) -> MovementDraft:
    """Build a simple-ledger entry (``entrada`` or ``salida``)."""
    kind = ENTRY_TYPES.get((entry_type or "").strip().lower())
    if kind is None:
        raise ValidationError(f"Tipo de registro desconocido: {entry_type!r}")
    concept = (concept or "").strip()
    if not concept or amount in (None, ""):
        raise ValidationError("Por favor completa todos los campos")
    value = parse_amount(amount)
    if value <= 0:
        raise ValidationError("Por favor ingresa un valor válido")
    return MovementDraft(kind=kind, category=Category.REGISTRO, description=concept, amount=value)


def edit_amount(state: LedgerState, record: MovementRecord, amount: RawNumber, ceiling: int = RECORD_CEILING) -> int:
    """Validate a new amount for an existing movement.

    Invoices and vouchers are held to the same ceiling and budget rules as
    new ones, with the edited movement left out of the totals.
    """
    value = parse_amount(amount)
    if value <= 0:
        raise ValidationError("El valor debe ser mayor que cero")
    if record.category in (Category.FACTURAS, Category.VALES):
        check_expense(state, value, ceiling=ceiling, exclude_id=record.id)
    return value
