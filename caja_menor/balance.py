"""Pure balance calculations over a ledger snapshot.

Every figure is recomputed from ``state.movements``; nothing here caches or
mutates state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from .config import RECORD_CEILING
from .errors import ValidationError
from .formatting import format_pesos
from .models import Category, LedgerState, MovementKind, MovementRecord

Predicate = Callable[[MovementRecord], bool]


@dataclass(frozen=True)
class BalanceSummary:
    initial_fund: int
    running_total: int
    current_balance: int
    total_income: int
    total_expense: int
    cash_counted: int
    budget_executed: int
    available_budget: int
    movement_count: int


def total_for(movements: Iterable[MovementRecord], predicate: Predicate) -> int:
    """Sum ``amount`` over the movements accepted by ``predicate``."""
    return sum(m.amount for m in movements if predicate(m))


def in_categories(*categories: Category) -> Predicate:
    wanted = set(categories)
    return lambda m: m.category in wanted


def of_kind(kind: MovementKind) -> Predicate:
    return lambda m: m.kind is kind


def running_total(state: LedgerState) -> int:
    return sum(m.signed_amount for m in state.movements)


def current_balance(state: LedgerState) -> int:
    return state.initial_fund + running_total(state)


def total_income(state: LedgerState) -> int:
    return total_for(state.movements, of_kind(MovementKind.INCOME))


def total_expense(state: LedgerState) -> int:
    return total_for(state.movements, of_kind(MovementKind.EXPENSE))


def category_totals(state: LedgerState) -> Dict[Category, int]:
    """Unsigned totals per category; categories without movements are omitted."""
    totals: Dict[Category, int] = {}
    for movement in state.movements:
        totals[movement.category] = totals.get(movement.category, 0) + movement.amount
    return totals


def cash_counted(state: LedgerState) -> int:
    return total_for(state.movements, in_categories(Category.BILLETES, Category.MONEDAS))


def total_invoices(state: LedgerState) -> int:
    return total_for(state.movements, in_categories(Category.FACTURAS))


def total_vouchers(state: LedgerState) -> int:
    return total_for(state.movements, in_categories(Category.VALES))


def budget_executed(state: LedgerState) -> int:
    return total_invoices(state) + total_vouchers(state)


def available_budget(state: LedgerState) -> int:
    return state.initial_fund - cash_counted(state) - total_vouchers(state)


def check_expense(
    state: LedgerState,
    amount: int,
    ceiling: int = RECORD_CEILING,
    exclude_id: Optional[int] = None,
) -> None:
    """Raise :class:`ValidationError` if an invoice/voucher of ``amount`` is not allowed.

    ``exclude_id`` names a movement being edited; the rules are evaluated as
    if it were not in the ledger.
    """
    if amount > ceiling:
        raise ValidationError(f"El valor supera el tope por registro de {format_pesos(ceiling)}")
    if exclude_id is not None:
        state = LedgerState(
            initial_fund=state.initial_fund,
            movements=[m for m in state.movements if m.id != exclude_id],
        )
    available = available_budget(state)
    if amount > available:
        raise ValidationError(f"Presupuesto insuficiente: disponible {format_pesos(available)}")
    if budget_executed(state) + amount > state.initial_fund:
        raise ValidationError(
            f"El presupuesto ejecutado superaría el fondo de {format_pesos(state.initial_fund)}"
        )


def summary(state: LedgerState) -> BalanceSummary:
    return BalanceSummary(
        initial_fund=state.initial_fund,
        running_total=running_total(state),
        current_balance=current_balance(state),
        total_income=total_income(state),
        total_expense=total_expense(state),
        cash_counted=cash_counted(state),
        budget_executed=budget_executed(state),
        available_budget=available_budget(state),
        movement_count=len(state.movements),
    )
