from __future__ import annotations

import json

import streamlit as st

from pertcalc.domain.report import (
    build_report_payload,
    build_report_text,
    convert,
    format_value,
    result_entries,
    utc_now_iso,
)
from pertcalc.estimation.types import UNITS, EstimateInput, EstimateResult


def render_how_it_works() -> None:
    with st.expander("How it works", expanded=False):
        st.markdown(
            """
            **Three-point estimate (beta-PERT)**

            - Mean: `(O + λ·M + P) / (λ + 2)` (λ = 4 is the classical PERT weighting)
            - Std dev: `σ = (P − O) / 6`
            - Percentile: `mean + z·σ`, with one-sided z-scores
              P80 = 0.8416, P85 = 1.036, P90 = 1.2816, P95 = 1.6449

            P90 means: 90% chance of finishing within this value.
            Days use 8 working hours per day.
            """
        )


def render_result_panel(inp: EstimateInput, result: EstimateResult) -> None:
    """Result metrics + copyable report."""

    st.subheader("Results")

    display_unit = st.radio(
        "Show results in",
        options=list(UNITS),
        horizontal=True,
        key="pc_display_unit",
    )

    def shown(v: float) -> str:
        return format_value(convert(v, inp.unit, display_unit), display_unit)

    k1, k2 = st.columns(2)
    with k1:
        st.metric("PERT mean", shown(result.mean))
    with k2:
        st.metric("Std dev (σ)", shown(result.sigma))

    requested = [(label, v) for label, v in result_entries(result) if v is not None]
    if requested:
        cols = st.columns(len(requested))
        for col, (label, v) in zip(cols, requested):
            with col:
                st.metric(label, shown(v))
    else:
        st.info("No percentile selected.")

    ts = utc_now_iso()
    with st.expander("Copy results", expanded=False):
        st.caption("Use the copy icon on the block below.")
        st.code(build_report_text(inp, result, timestamp=ts), language=None)
        st.download_button(
            "⬇️ Download result (JSON)",
            data=json.dumps(build_report_payload(inp, result, timestamp=ts), indent=2, ensure_ascii=False),
            file_name="pert_result.json",
            mime="application/json",
            key="pc_download_result",
        )
