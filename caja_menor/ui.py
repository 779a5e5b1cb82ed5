"""Streamlit components shared by the petty-cash pages.

Keeps one :class:`~caja_menor.ledger.LedgerStore` per ledger in
``st.session_state`` and renders the balance header, movement history and
report downloads. Confirmation of destructive actions lives here, not in the
store.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

from . import balance, report
from .errors import NotFoundError, ValidationError
from .formatting import escape_dollar_for_markdown, format_pesos, format_signed_pesos
from .forms import edit_amount, parse_amount
from .ledger import LedgerStore
from .models import LedgerState, MovementDraft, MovementRecord
from .storage import JsonFileStorage

DraftBuilder = Callable[[], Optional[MovementDraft]]
FLASH_KEY = "caja_menor_flash"


def rerun() -> None:
    rerun_fn = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun_fn:
        rerun_fn()


def flash(message: str) -> None:
    """Queue a success message for the next run and rerun the page."""
    st.session_state[FLASH_KEY] = message
    rerun()


def show_flash() -> None:
    message = st.session_state.pop(FLASH_KEY, None)
    if message:
        st.success(escape_dollar_for_markdown(message))


def get_store(session_key: str, path: Path) -> LedgerStore:
    """Return the session's store for ``path``, loading it on first use."""
    store = st.session_state.get(session_key)
    if store is None:
        store = LedgerStore(JsonFileStorage(path))
        st.session_state[session_key] = store
        if store.last_error is not None:
            st.session_state[f"{session_key}_load_warning"] = str(store.last_error)
    return store


def show_load_warning(session_key: str) -> None:
    message = st.session_state.pop(f"{session_key}_load_warning", None)
    if message:
        st.warning(f"⚠️ Los datos guardados no se pudieron leer; se inició un registro vacío. ({message})")


def warn_persistence(store: LedgerStore) -> None:
    if store.last_error is not None:
        st.warning(f"⚠️ Los cambios no se pudieron guardar en disco: {store.last_error}")


def submit_draft(store: LedgerStore, build: DraftBuilder) -> Optional[MovementRecord]:
    """Validate with ``build`` and append the draft.

    Validation errors are shown to the user and leave the ledger untouched;
    an empty form (``build`` returns ``None``) does nothing.
    """
    try:
        draft = build()
    except ValidationError as exc:
        st.error(str(exc))
        return None
    if draft is None:
        return None
    record = store.append(draft)
    warn_persistence(store)
    return record


def apply_edit(store: LedgerStore, record_id: int, description: str, amount_text: str) -> Optional[MovementRecord]:
    try:
        record = store.get(record_id)
        amount = edit_amount(store.state, record, amount_text)
        updated = store.update(record_id, description=description or None, amount=amount)
    except NotFoundError as exc:
        st.warning(str(exc))
        return None
    except ValidationError as exc:
        st.error(str(exc))
        return None
    warn_persistence(store)
    return updated


def apply_initial_fund(store: LedgerStore, amount_text: str) -> bool:
    try:
        store.set_initial_fund(parse_amount(amount_text))
    except ValidationError as exc:
        st.error(str(exc))
        return False
    warn_persistence(store)
    return True


def apply_remove(store: LedgerStore, record_id: int) -> bool:
    try:
        store.remove(record_id)
    except NotFoundError as exc:
        st.warning(str(exc))
        return False
    warn_persistence(store)
    return True


class CajaMenorUI:
    """Layout pieces reused by every page."""
    _PAGE_CONFIGURED = False

    def setup_page_config(self, page_title: str = "Caja Menor", page_icon: str = "💰") -> None:
        if CajaMenorUI._PAGE_CONFIGURED:
            return
        try:
            st.set_page_config(page_title=page_title, page_icon=page_icon, layout="wide")
        except StreamlitAPIException:
            # Already configured upstream; avoid raising to keep reruns smooth.
            pass
        finally:
            CajaMenorUI._PAGE_CONFIGURED = True

    def render_balance_overview(self, state: LedgerState, show_budget: bool = False) -> None:
        """Render fund, running total and balance metrics."""
        figures = balance.summary(state)
        columns = st.columns(5 if show_budget else 3)
        columns[0].metric("Fondo Inicial", format_pesos(figures.initial_fund))
        columns[1].metric("Contador Total", format_pesos(figures.running_total))
        columns[2].metric("Saldo Actual", format_pesos(figures.current_balance))
        if show_budget:
            columns[3].metric("Presupuesto Ejecutado", format_pesos(figures.budget_executed))
            columns[4].metric("Presupuesto Disponible", format_pesos(figures.available_budget))

    def render_fund_setup(self, store: LedgerStore, key_prefix: str) -> None:
        """Let the user set the initial fund while the ledger is still empty."""
        if store.state.movements:
            return
        with st.expander("💼 Configurar fondo inicial"):
            with st.form(f"{key_prefix}_fund_form"):
                amount_text = st.text_input("Fondo inicial (COP)", value=str(store.state.initial_fund))
                if st.form_submit_button("Guardar fondo"):
                    if apply_initial_fund(store, amount_text):
                        flash(f"Fondo inicial: {format_pesos(store.state.initial_fund)}")

    def render_history(self, store: LedgerStore, key_prefix: str, editable: bool = True) -> None:
        """Render the movement list with per-row edit and delete controls."""
        movements = store.state.movements
        st.subheader(f"🧾 Historial de Movimientos ({len(movements)})")
        if not movements:
            st.info("No hay registros aún")
            return

        frame = report.movements_frame(movements)
        frame['Valor'] = frame['Valor'].map(format_signed_pesos)
        st.dataframe(frame.drop(columns=['ID']), use_container_width=True, hide_index=True)

        options = {m.id: f"{m.timestamp} | {m.description} | {format_signed_pesos(m.signed_amount)}" for m in movements}
        selected_id = st.selectbox(
            "Movimiento",
            options=list(options),
            format_func=lambda record_id: options[record_id],
            key=f"{key_prefix}_selected",
        )
        selected = store.get(selected_id)

        if editable:
            with st.form(f"{key_prefix}_edit_form"):
                description = st.text_input("Detalle", value=selected.description)
                amount_text = st.text_input("Valor (COP)", value=str(selected.amount))
                if st.form_submit_button("💾 Guardar cambios"):
                    if apply_edit(store, selected_id, description, amount_text):
                        flash("Movimiento actualizado")

        confirm = st.checkbox("Confirmo que deseo eliminar este movimiento", key=f"{key_prefix}_confirm_delete")
        if st.button("🗑️ Eliminar movimiento", key=f"{key_prefix}_delete", disabled=not confirm):
            if apply_remove(store, selected_id):
                rerun()

    def render_reset(self, store: LedgerStore, key_prefix: str) -> None:
        with st.expander("⚠️ Resetear datos"):
            st.write("Esta acción borra todo el historial y no se puede deshacer.")
            confirm = st.checkbox("Sí, borrar todo", key=f"{key_prefix}_confirm_reset")
            if st.button("Resetear", key=f"{key_prefix}_reset", disabled=not confirm, type="primary"):
                store.reset()
                warn_persistence(store)
                rerun()

    def render_downloads(self, store: LedgerStore, key_prefix: str) -> None:
        """Offer the printable report and the JSON export."""
        st.subheader("📄 Reporte y Exportación")
        category_filter = st.text_input(
            "Filtrar reporte",
            placeholder="Factura, vale, billetes, ingreso...",
            key=f"{key_prefix}_report_filter",
        )
        document = report.render(store.state, category_filter or None)
        st.caption(escape_dollar_for_markdown(
            f"{len(document.rows)} movimientos, total {format_pesos(document.total)}"
        ))
        col_report, col_export = st.columns(2)
        with col_report:
            st.download_button(
                label="🖨️ Descargar reporte (HTML)",
                data=document.html,
                file_name=report.report_filename(),
                mime="text/html",
                key=f"{key_prefix}_download_report",
            )
        with col_export:
            st.download_button(
                label="📥 Exportar JSON",
                data=json.dumps(report.export_document(store.state), indent=2, ensure_ascii=False),
                file_name=report.export_filename(),
                mime="application/json",
                key=f"{key_prefix}_download_export",
            )
