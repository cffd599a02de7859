"""Smoke tests for the Streamlit page (streamlit.testing AppTest)."""

import re
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from pertcalc.domain.validation import MSG_ORDER
from pertcalc.estimation.pert import calculate
from pertcalc.estimation.types import EstimateInput
from pertcalc.storage.history_store import HistoryStore, KeyValueStore

APP_PATH = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture
def make_app(monkeypatch, db_path):
    monkeypatch.setenv("PERTCALC_DB_PATH", str(db_path))
    monkeypatch.delenv("PERTCALC_HISTORY_KEY", raising=False)
    monkeypatch.setenv("TZ", "UTC")

    def _make() -> AppTest:
        at = AppTest.from_file(APP_PATH, default_timeout=30)
        at.run()
        return at

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


def _fill(at, O, M, P):
    at.number_input(key="pc_O").set_value(O)
    at.number_input(key="pc_M").set_value(M)
    at.number_input(key="pc_P").set_value(P)


def _metrics(at) -> dict:
    return {m.label: m.value for m in at.metric}


def _toasts(at) -> list:
    return [t.value for t in at.toast]


def _seed(history, created_at, **kw):
    inp = EstimateInput(**{"O": 2, "M": 4, "P": 10, "percentiles": (90,), **kw})
    history.add(inp, calculate(inp), created_at=created_at)


def test_initial_render(app):
    assert not app.exception
    assert not app.metric
    assert app.button(key="pc_save").disabled


def test_calculate_shows_results(app):
    _fill(app, 2.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()

    assert not app.exception
    metrics = _metrics(app)
    assert metrics["PERT mean"] == "4.67 hours"
    assert metrics["Std dev (σ)"] == "1.33 hours"
    assert metrics["P90"] == "6.38 hours"
    assert "P80" not in metrics


def test_display_unit_switch_converts_results(app):
    _fill(app, 2.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()
    app.radio(key="pc_display_unit").set_value("days").run()

    assert not app.exception
    metrics = _metrics(app)
    assert metrics["PERT mean"] == "0.58 days"
    assert metrics["Std dev (σ)"] == "0.17 days"
    assert metrics["P90"] == "0.8 days"


def test_ordering_error_blocks_calculation(app):
    _fill(app, 5.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()

    assert any(MSG_ORDER in e.value for e in app.error)
    assert not app.metric


def test_save_to_history(app, db_path):
    _fill(app, 2.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()
    app.button(key="pc_save").click().run()

    assert not app.exception
    assert "Entry saved to history!" in _toasts(app)
    entries = HistoryStore(KeyValueStore(str(db_path))).load()
    assert len(entries) == 1
    assert entries[0].p90 == 6.38


def test_toast_is_shown_once(app):
    _fill(app, 2.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()
    app.button(key="pc_save").click().run()
    app.run()

    assert "Entry saved to history!" not in _toasts(app)


def test_clear_resets_form(app):
    _fill(app, 2.0, 4.0, 10.0)
    app.button(key="pc_calculate").click().run()
    app.button(key="pc_clear").click().run()

    assert not app.exception
    assert not app.metric
    assert app.number_input(key="pc_O").value is None


def test_reapply_restores_and_recalculates(make_app, history):
    _seed(history, "2024-01-01T10:00:00+00:00", lam=3, percentiles=(80,))
    at = make_app()

    at.button(key="pc_reapply").click().run()

    assert not at.exception
    assert at.number_input(key="pc_O").value == 2
    assert at.number_input(key="pc_M").value == 4
    assert at.number_input(key="pc_P").value == 10
    assert at.number_input(key="pc_lambda").value == 3
    assert at.radio(key="pc_percentile").value == 90

    metrics = _metrics(at)
    assert metrics["PERT mean"] == "4.8 hours"
    assert metrics["Std dev (σ)"] == "1.33 hours"
    assert metrics["P90"] == "6.51 hours"
    assert "Values reapplied!" in _toasts(at)


def test_delete_removes_selected_entry(make_app, history):
    _seed(history, "2024-01-01T10:00:00+00:00")
    _seed(history, "2024-01-02T10:00:00+00:00", O=1, M=2, P=3)
    at = make_app()

    assert at.selectbox(key="pc_history_idx").value == 0
    at.button(key="pc_delete").click().run()

    assert not at.exception
    assert [e.created_at for e in history.load()] == ["2024-01-01T10:00:00+00:00"]
    assert "Entry removed from history!" in _toasts(at)


def test_every_style_rule_is_used(app):
    markdown = [m.value for m in app.markdown]
    style = next(m for m in markdown if "<style>" in m)
    html = "\n".join(m for m in markdown if "<style>" not in m)

    selectors = set(re.findall(r"\.([\w-]+)\s*\{", style))
    used = set(re.findall(r'class="([\w-]+)"', html))
    assert selectors
    assert selectors <= used
