"""Printable report and JSON export of a ledger snapshot.

Both are read-only consumers of :class:`~caja_menor.models.LedgerState`.
The HTML report is meant to be opened in a browser and printed to PDF.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from . import balance
from .formatting import format_pesos, format_signed_pesos
from .models import Category, LedgerState, MovementKind, MovementRecord

REPORT_COLUMNS = ["ID", "Fecha", "Tipo", "Categoría", "Detalle", "Valor"]
KIND_LABELS = {MovementKind.INCOME: "Ingreso", MovementKind.EXPENSE: "Egreso"}


@dataclass(frozen=True)
class ReportDocument:
    title: str
    generated_at: datetime
    category_filter: Optional[str]
    initial_fund: int
    running_total: int
    current_balance: int
    rows: pd.DataFrame
    total: int
    html: str


def movements_frame(movements: Sequence[MovementRecord]) -> pd.DataFrame:
    """One row per movement with the signed amount in ``Valor``."""
    records = [
        {
            "ID": m.id,
            "Fecha": m.timestamp,
            "Tipo": KIND_LABELS[m.kind],
            "Categoría": m.category.label,
            "Detalle": m.description,
            "Valor": m.signed_amount,
        }
        for m in movements
    ]
    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def filter_movements(movements: Sequence[MovementRecord], category_filter: Optional[str]) -> List[MovementRecord]:
    """Keep movements whose description, category or kind contains the filter."""
    needle = (category_filter or "").strip().lower()
    if not needle:
        return list(movements)
    return [
        m
        for m in movements
        if needle in m.description.lower()
        or needle in m.category.value
        or needle in m.category.label.lower()
        or needle in m.kind.value.lower()
        or needle in KIND_LABELS[m.kind].lower()
    ]


def _render_html(
    title: str,
    generated_at: datetime,
    category_filter: Optional[str],
    state: LedgerState,
    frame: pd.DataFrame,
    total: int,
) -> str:
    display = frame.drop(columns=["ID"]).copy()
    display["Valor"] = display["Valor"].map(format_signed_pesos)
    total_row = {column: "" for column in display.columns}
    total_row.update({"Detalle": f"Total ({len(frame)} movimientos)", "Valor": format_pesos(total)})
    footer = pd.DataFrame([total_row], columns=display.columns)
    display = pd.concat([display, footer], ignore_index=True) if not display.empty else footer
    table = display.to_html(index=False, escape=True, classes="movimientos", border=0)
    filter_line = (
        f"<p>Filtro: {html.escape(category_filter)}</p>" if category_filter and category_filter.strip() else ""
    )
    return f"""<!DOCTYPE html>
<html lang="es">
<head>
<meta charset="utf-8">
<title>{html.escape(title)}</title>
<style>
body {{ font-family: sans-serif; margin: 2em; }}
table.movimientos {{ border-collapse: collapse; width: 100%; }}
table.movimientos th, table.movimientos td {{ border-bottom: 1px solid #ccc; padding: 4px 8px; text-align: left; }}
table.movimientos tr:last-child td {{ font-weight: bold; border-top: 2px solid #333; }}
</style>
</head>
<body>
<h1>{html.escape(title)}</h1>
<p>Generado: {generated_at:%d/%m/%Y %H:%M}</p>
{filter_line}
<ul class="resumen">
<li>Fondo inicial: {format_pesos(state.initial_fund)}</li>
<li>Contador total: {format_pesos(balance.running_total(state))}</li>
<li>Saldo actual: {format_pesos(balance.current_balance(state))}</li>
</ul>
{table}
</body>
</html>
"""


def render(
    state: LedgerState,
    category_filter: Optional[str] = None,
    generated_at: Optional[datetime] = None,
    title: str = "Reporte de Caja Menor",
) -> ReportDocument:
    """Lay out the (optionally filtered) movements with header totals."""
    generated_at = generated_at or datetime.now()
    selected = filter_movements(state.movements, category_filter)
    frame = movements_frame(selected)
    total = sum(m.amount for m in selected)
    return ReportDocument(
        title=title,
        generated_at=generated_at,
        category_filter=category_filter,
        initial_fund=state.initial_fund,
        running_total=balance.running_total(state),
        current_balance=balance.current_balance(state),
        rows=frame,
        total=total,
        html=_render_html(title, generated_at, category_filter, state, frame, total),
    )


def export_document(state: LedgerState, exported_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Raw collections plus derived totals, ready for ``json.dumps``."""
    exported_at = exported_at or datetime.now()
    per_category = balance.category_totals(state)
    categories = {
        category.value: [m.to_dict() for m in state.movements if m.category is category]
        for category in Category
    }
    totals: Dict[str, int] = {category.value: per_category.get(category, 0) for category in Category}
    totals.update(
        {
            "income": balance.total_income(state),
            "expense": balance.total_expense(state),
            "runningTotal": balance.running_total(state),
            "budgetExecuted": balance.budget_executed(state),
            "availableBudget": balance.available_budget(state),
        }
    )
    return {
        "exportTimestamp": exported_at.isoformat(timespec="seconds"),
        "initialFund": state.initial_fund,
        "currentBalance": balance.current_balance(state),
        "categories": categories,
        "totals": totals,
    }


def export_filename(day: Optional[date] = None) -> str:
    return f"caja_menor_{(day or date.today()).isoformat()}.json"


def report_filename(day: Optional[date] = None) -> str:
    return f"reporte_caja_menor_{(day or date.today()).isoformat()}.html"
