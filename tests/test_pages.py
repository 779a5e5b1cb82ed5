"""Tests for the Streamlit helpers and page functions, without a running server."""

from __future__ import annotations

import contextlib
import importlib.util
import types
from datetime import datetime
from pathlib import Path

from caja_menor import forms, ui
from caja_menor.errors import PersistenceError
from caja_menor.ledger import LedgerStore
from caja_menor.models import Category, MovementDraft, MovementKind
from caja_menor.storage import MemoryStorage

PAGES_DIR = Path(__file__).resolve().parents[1] / 'caja_menor' / 'pages'


def _load_page_module(filename: str, name: str):
    spec = importlib.util.spec_from_file_location(name, PAGES_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _fake_st(**overrides):
    messages = {'error': [], 'warning': [], 'success': []}
    namespace = types.SimpleNamespace(
        session_state={},
        error=messages['error'].append,
        warning=messages['warning'].append,
        success=messages['success'].append,
        rerun=lambda: None,
    )
    for key, value in overrides.items():
        setattr(namespace, key, value)
    return namespace, messages


def _store() -> LedgerStore:
    return LedgerStore(MemoryStorage(), initial_fund=4_000_000, clock=lambda: datetime(2024, 5, 1, 9, 0))


def test_submit_draft_appends_valid_input(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    record = ui.submit_draft(store, lambda: forms.bills_draft({100000: "2", 50000: "1"}))
    assert record.amount == 250_000
    assert store.state.current_balance == 4_250_000
    assert messages['error'] == []


def test_submit_draft_reports_validation_errors(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    record = ui.submit_draft(store, lambda: forms.invoice_draft(store.state, "Repuestos", "200001"))
    assert record is None
    assert store.state.movements == []
    assert len(messages['error']) == 1


def test_submit_draft_ignores_empty_forms(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    assert ui.submit_draft(store, lambda: forms.coins_draft({})) is None
    assert messages == {'error': [], 'warning': [], 'success': []}


def test_submit_draft_warns_when_save_fails(monkeypatch) -> None:
    class BrokenStorage(MemoryStorage):
        def set_many(self, values):
            raise PersistenceError("quota exceeded")

    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = LedgerStore(BrokenStorage(), initial_fund=1_000)
    record = ui.submit_draft(store, lambda: forms.entry_draft("entrada", "Reintegro", "500"))
    assert record is not None
    assert store.state.current_balance == 1_500
    assert len(messages['warning']) == 1


def test_apply_remove_unknown_id_warns(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    assert ui.apply_remove(_store(), 999) is False
    assert messages['warning'] == ["Movement 999 not found"]


def test_apply_edit_updates_amount(monkeypatch) -> None:
    fake, _ = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    record = store.append(MovementDraft(MovementKind.EXPENSE, Category.FACTURAS, "Factura: Aseo", 50_000))
    updated = ui.apply_edit(store, record.id, "Factura: Aseo general", "$ 60.000")
    assert updated.amount == 60_000
    assert store.state.current_balance == 4_000_000 - 60_000


def test_get_store_is_cached_in_session(monkeypatch, tmp_path) -> None:
    fake, _ = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    first = ui.get_store('caja_store', tmp_path / 'caja.json')
    second = ui.get_store('caja_store', tmp_path / 'caja.json')
    assert first is second
    assert fake.session_state['caja_store'] is first


def test_get_store_flags_unreadable_file(monkeypatch, tmp_path) -> None:
    path = tmp_path / 'caja.json'
    path.write_text('{oops', encoding='utf-8')
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    ui.get_store('caja_store', path)
    ui.show_load_warning('caja_store')
    assert len(messages['warning']) == 1
    ui.show_load_warning('caja_store')
    assert len(messages['warning']) == 1


def test_registros_remove_oldest_batch(monkeypatch) -> None:
    module = _load_page_module('2_📋_Registros.py', 'registros_page_test')
    fake, _ = _fake_st(checkbox=lambda *args, **kwargs: True, button=lambda *args, **kwargs: True)
    monkeypatch.setattr(module, 'st', fake)
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    for idx in range(12):
        store.append(forms.entry_draft("entrada", f"r{idx}", "1000"))
    module._render_remove_oldest(store)
    assert [m.description for m in store.state.movements] == ["r11", "r10"]


def test_registros_remove_oldest_waits_for_confirmation(monkeypatch) -> None:
    module = _load_page_module('2_📋_Registros.py', 'registros_page_test')
    fake, _ = _fake_st(checkbox=lambda *args, **kwargs: False, button=lambda *args, **kwargs: False)
    monkeypatch.setattr(module, 'st', fake)
    store = _store()
    store.append(forms.entry_draft("salida", "Pago luz", "35000"))
    module._render_remove_oldest(store)
    assert len(store.state.movements) == 1


def test_caja_page_module_loads() -> None:
    module = _load_page_module('1_💵_Caja_Menor.py', 'caja_page_test')
    assert module.SESSION_KEY == 'caja_store'
    assert callable(module.main)


def test_submit_draft_rejects_superscript_count(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    assert ui.submit_draft(store, lambda: forms.bills_draft({100000: "²"})) is None
    assert store.state.movements == []
    assert len(messages['error']) == 1


def test_flash_message_survives_rerun(monkeypatch) -> None:
    reruns = []
    fake, messages = _fake_st(rerun=lambda: reruns.append(True))
    monkeypatch.setattr(ui, 'st', fake)
    ui.flash("Billetes: 1 x $ 100.000 = $ 100.000")
    assert reruns == [True]
    assert messages['success'] == []
    ui.show_flash()
    assert messages['success'] == [r"Billetes: 1 x \$ 100.000 = \$ 100.000"]
    ui.show_flash()
    assert len(messages['success']) == 1


def test_caja_form_submission_flashes_after_rerun(monkeypatch) -> None:
    module = _load_page_module('1_💵_Caja_Menor.py', 'caja_page_flash_test')
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    monkeypatch.setattr(module, 'st', fake)
    store = _store()
    record = ui.submit_draft(store, lambda: forms.invoice_draft(store.state, "Aseo", "20000"))
    module.flash(f"{record.description} = $ 20.000")
    assert fake.session_state[ui.FLASH_KEY] == "Factura: Aseo = $ 20.000"
    ui.show_flash()
    assert ui.FLASH_KEY not in fake.session_state
    assert len(messages['success']) == 1


def test_apply_initial_fund_before_first_movement(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    storage = MemoryStorage()
    store = LedgerStore(storage, initial_fund=4_000_000)
    assert ui.apply_initial_fund(store, "$ 2.500.000") is True
    assert store.state.initial_fund == 2_500_000
    assert LedgerStore(storage, initial_fund=4_000_000).state.initial_fund == 2_500_000
    assert messages['error'] == []


def test_apply_initial_fund_after_movements_shows_error(monkeypatch) -> None:
    fake, messages = _fake_st()
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    store.append(forms.entry_draft("entrada", "Reintegro", "1000"))
    assert ui.apply_initial_fund(store, "2000000") is False
    assert store.state.initial_fund == 4_000_000
    assert len(messages['error']) == 1


def test_fund_setup_is_hidden_once_movements_exist(monkeypatch) -> None:
    calls = []
    fake, _ = _fake_st(expander=lambda *args, **kwargs: calls.append(args))
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    store.append(forms.entry_draft("entrada", "Reintegro", "1000"))
    ui.CajaMenorUI().render_fund_setup(store, 'caja_store')
    assert calls == []


def test_fund_setup_form_sets_fund_and_flashes(monkeypatch) -> None:
    fake, messages = _fake_st(
        expander=lambda *args, **kwargs: contextlib.nullcontext(),
        form=lambda *args, **kwargs: contextlib.nullcontext(),
        text_input=lambda *args, **kwargs: "1.000.000",
        form_submit_button=lambda *args, **kwargs: True,
    )
    monkeypatch.setattr(ui, 'st', fake)
    store = _store()
    ui.CajaMenorUI().render_fund_setup(store, 'caja_store')
    assert store.state.initial_fund == 1_000_000
    assert fake.session_state[ui.FLASH_KEY] == "Fondo inicial: $ 1.000.000"
    assert messages['error'] == []
