import os
import sys

# Add project root to sys.path for Streamlit Cloud
# so imports like 'from pertcalc.estimation.pert' work in all environments
_project_root = os.path.dirname(os.path.abspath(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import logging

import streamlit as st

from pertcalc.config import configure_logging, load_settings
from pertcalc.domain.validation import validate_form, to_input
from pertcalc.estimation.pert import calculate
from pertcalc.estimation.types import PERCENTILES, UNITS
from pertcalc.storage.history_store import HistoryEntry
from pertcalc.ui.history import flush_toasts, get_history, queue_toast, render_history_panel
from pertcalc.ui.results import render_how_it_works, render_result_panel
from pertcalc.ui.styles import apply_base_styles, render_header

# -----------------------------
# Page + settings
# -----------------------------
apply_base_styles()

settings = load_settings()
configure_logging(settings.log_level)
logger = logging.getLogger("pertcalc.app")

TITLE = "3-point / PERT / P90 calculator"
DEFAULT_PERCENTILE = 90


def init_state():
    st.session_state.setdefault("pc_unit", "hours")
    st.session_state.setdefault("pc_percentile", DEFAULT_PERCENTILE)
    st.session_state.setdefault("pc_lambda", float(settings.default_lambda))
    st.session_state.setdefault("pc_display_unit", "hours")

    st.session_state.setdefault("pc_input", None)    # EstimateInput of the last run
    st.session_state.setdefault("pc_result", None)   # EstimateResult of the last run
    st.session_state.setdefault("pc_submitted", False)


def _validate_current():
    return validate_form(
        st.session_state.get("pc_O"),
        st.session_state.get("pc_M"),
        st.session_state.get("pc_P"),
        st.session_state.get("pc_lambda"),
    )


# -----------------------------
# Callbacks (run before the page re-renders)
# -----------------------------
def run_calculation() -> None:
    st.session_state["pc_submitted"] = True
    check = _validate_current()
    if not check.ok:
        st.session_state["pc_input"] = None
        st.session_state["pc_result"] = None
        return

    inp = to_input(
        check,
        unit=st.session_state.get("pc_unit", "hours"),
        percentiles=[int(st.session_state.get("pc_percentile", DEFAULT_PERCENTILE))],
    )
    st.session_state["pc_input"] = inp
    st.session_state["pc_result"] = calculate(inp)
    logger.debug(f"Calculated {inp}")


def clear_form() -> None:
    st.session_state["pc_O"] = None
    st.session_state["pc_M"] = None
    st.session_state["pc_P"] = None
    st.session_state["pc_unit"] = "hours"
    st.session_state["pc_percentile"] = DEFAULT_PERCENTILE
    st.session_state["pc_lambda"] = float(settings.default_lambda)
    st.session_state["pc_input"] = None
    st.session_state["pc_result"] = None
    st.session_state["pc_submitted"] = False


def save_entry() -> None:
    inp = st.session_state.get("pc_input")
    result = st.session_state.get("pc_result")
    if inp is None or result is None or not _validate_current().ok:
        return
    get_history(settings).add(inp, result)
    queue_toast("Entry saved to history!")


def reapply_entry(entry: HistoryEntry) -> None:
    st.session_state["pc_O"] = entry.input.O
    st.session_state["pc_M"] = entry.input.M
    st.session_state["pc_P"] = entry.input.P
    st.session_state["pc_unit"] = entry.input.unit
    st.session_state["pc_lambda"] = entry.input.lam
    st.session_state["pc_percentile"] = DEFAULT_PERCENTILE

    run_calculation()
    queue_toast("Values reapplied!")


init_state()

# -----------------------------
# Header
# -----------------------------
render_header(TITLE, "Optimistic, most likely and pessimistic estimates in. Mean, σ and P80–P95 out.")
st.write("")

# -----------------------------
# Inputs
# -----------------------------
with st.container():
    c1, c2, c3 = st.columns(3)
    with c1:
        st.number_input("Optimistic (O)", value=None, step=0.5, placeholder="e.g. 2", key="pc_O")
    with c2:
        st.number_input("Most likely (M)", value=None, step=0.5, placeholder="e.g. 4", key="pc_M")
    with c3:
        st.number_input("Pessimistic (P)", value=None, step=0.5, placeholder="e.g. 10", key="pc_P")

    u1, u2 = st.columns(2)
    with u1:
        st.radio("Unit", options=list(UNITS), horizontal=True, key="pc_unit")
    with u2:
        st.radio(
            "Percentile",
            options=list(PERCENTILES),
            format_func=lambda p: f"P{p}",
            horizontal=True,
            key="pc_percentile",
        )

    with st.expander("Advanced", expanded=False):
        st.number_input(
            "λ (most-likely weight)",
            step=0.5,
            help="Beta-PERT weight on M. 4 is the classical PERT convention.",
            key="pc_lambda",
        )

    render_how_it_works()

# -----------------------------
# Validate input
# -----------------------------
check = _validate_current()
if check.form_error:
    st.error(check.form_error)
if st.session_state.pc_submitted:
    for name, msg in check.field_errors.items():
        st.warning(f"{name}: {msg}")

b1, b2, b3 = st.columns(3)
with b1:
    st.button("Calculate", type="primary", key="pc_calculate", on_click=run_calculation)
with b2:
    st.button("Clear", key="pc_clear", on_click=clear_form)
with b3:
    st.button(
        "💾 Save to history",
        key="pc_save",
        on_click=save_entry,
        disabled=st.session_state.pc_result is None or not check.ok,
    )

# -----------------------------
# Results
# -----------------------------
if st.session_state.pc_result is not None and st.session_state.pc_input is not None:
    st.write("")
    render_result_panel(st.session_state.pc_input, st.session_state.pc_result)

# -----------------------------
# History
# -----------------------------
st.write("")
render_history_panel(history=get_history(settings), tz_name=settings.tz_name, on_reapply=reapply_entry)

flush_toasts()
