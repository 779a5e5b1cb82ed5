"""Unit tests for caja_menor.report."""

from __future__ import annotations

import json
from datetime import date, datetime

from caja_menor import report
from caja_menor.models import Category, LedgerState, MovementKind, MovementRecord


def _state() -> LedgerState:
    return LedgerState(
        initial_fund=500_000,
        movements=[
            MovementRecord(3, "02/05/2024, 09:00:00", MovementKind.EXPENSE, Category.VALES, "Vale: <Taxi>", 15_000),
            MovementRecord(2, "01/05/2024, 18:00:00", MovementKind.EXPENSE, Category.FACTURAS, "Factura: Papelería", 40_000),
            MovementRecord(1, "01/05/2024, 08:00:00", MovementKind.INCOME, Category.BILLETES, "Billetes: 1 x $ 100.000", 100_000),
        ],
    )


def test_movements_frame_uses_signed_amounts() -> None:
    frame = report.movements_frame(_state().movements)
    assert list(frame.columns) == report.REPORT_COLUMNS
    assert frame["Valor"].tolist() == [-15_000, -40_000, 100_000]


def test_render_without_filter_totals_everything() -> None:
    state = _state()
    document = report.render(state, generated_at=datetime(2024, 5, 2, 12, 0))
    assert len(document.rows) == 3
    assert document.total == 155_000
    assert document.running_total == 45_000
    assert document.current_balance == 545_000
    assert "Saldo actual: $ 545.000" in document.html
    assert "02/05/2024 12:00" in document.html


def test_render_filters_by_category_and_description() -> None:
    state = _state()
    by_category = report.render(state, "factura")
    assert by_category.rows["ID"].tolist() == [2]
    assert by_category.total == 40_000
    by_kind = report.render(state, "egreso")
    assert by_kind.rows["ID"].tolist() == [3, 2]
    by_text = report.render(state, "taxi")
    assert by_text.total == 15_000


def test_render_escapes_descriptions_and_is_read_only() -> None:
    state = _state()
    before = list(state.movements)
    document = report.render(state)
    assert "<Taxi>" not in document.html
    assert "&lt;Taxi&gt;" in document.html
    assert state.movements == before


def test_render_empty_ledger() -> None:
    document = report.render(LedgerState(initial_fund=1_000))
    assert document.rows.empty
    assert document.total == 0
    assert "Total (0 movimientos)" in document.html


def test_export_document_contents() -> None:
    exported = report.export_document(_state(), exported_at=datetime(2024, 5, 2, 12, 0, 5))
    assert exported["exportTimestamp"] == "2024-05-02T12:00:05"
    assert exported["initialFund"] == 500_000
    assert exported["currentBalance"] == 545_000
    assert [m["id"] for m in exported["categories"]["facturas"]] == [2]
    assert exported["categories"]["monedas"] == []
    assert exported["totals"]["billetes"] == 100_000
    assert exported["totals"]["budgetExecuted"] == 55_000
    json.dumps(exported)


def test_filenames_use_the_date() -> None:
    assert report.export_filename(date(2024, 5, 2)) == "caja_menor_2024-05-02.json"
    assert report.report_filename(date(2024, 5, 2)) == "reporte_caja_menor_2024-05-02.html"


def test_render_puts_total_in_last_table_row() -> None:
    document = report.render(_state())
    last_row = document.html.rsplit("<tr>", 1)[1]
    assert "Total (3 movimientos)" in last_row
    assert "$ 155.000" in last_row
    assert last_row.index("</tr>") < last_row.index("</table>")
