from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, MutableMapping

import pandas as pd
import streamlit as st

from pertcalc.config import Settings
from pertcalc.domain.report import fmt_num, format_timestamp
from pertcalc.storage.history_store import HistoryEntry, HistoryStore, KeyValueStore

logger = logging.getLogger(__name__)

TOAST_KEY = "_pc_toasts"
IMPORTED_KEY = "_pc_imported_file_id"


def get_history(settings: Settings) -> HistoryStore:
    # Cache the store per Streamlit session.
    if "_pc_history" not in st.session_state:
        st.session_state["_pc_history"] = HistoryStore(KeyValueStore(db_path=settings.db_path), key=settings.history_key)
    return st.session_state["_pc_history"]


def queue_toast(message: str) -> None:
    """Callbacks run before the page; park the message and show it on render."""
    st.session_state.setdefault(TOAST_KEY, []).append(message)


def flush_toasts() -> None:
    for msg in st.session_state.pop(TOAST_KEY, []) or []:
        st.toast(msg)


def history_frame(entries: List[HistoryEntry], tz_name: str) -> pd.DataFrame:
    rows = []
    for e in entries:
        p90 = e.p90
        rows.append(
            {
                "Date": format_timestamp(e.created_at, tz_name),
                "O": e.input.O,
                "M": e.input.M,
                "P": e.input.P,
                "Unit": e.input.unit,
                "λ": e.input.lam,
                "Mean": e.result.mean,
                "σ": e.result.sigma,
                "P90": 0.0 if p90 is None else p90,
            }
        )
    return pd.DataFrame(rows, columns=["Date", "O", "M", "P", "Unit", "λ", "Mean", "σ", "P90"])


def _entry_label(e: HistoryEntry, tz_name: str) -> str:
    i = e.input
    return (
        f"{format_timestamp(e.created_at, tz_name)} · O={fmt_num(i.O)} M={fmt_num(i.M)} P={fmt_num(i.P)} {i.unit}"
        f" · mean {fmt_num(e.result.mean)}"
    )


def _delete_entry(history: HistoryStore, index: int) -> None:
    history.remove(index)
    st.session_state["pc_history_idx"] = 0
    queue_toast("Entry removed from history!")


def render_export_import(history: HistoryStore) -> None:
    with st.expander("Export / Import", expanded=False):
        st.download_button(
            "⬇️ Export history (JSON)",
            data=json.dumps(history.export_history(), indent=2, ensure_ascii=False),
            file_name="pert_history.json",
            mime="application/json",
            key="pc_export_history",
        )

        up = st.file_uploader(
            "Import a prior export (JSON)",
            type=["json"],
            accept_multiple_files=False,
            key="pc_import_file",
        )
        # The uploader keeps its file across reruns; import each upload once.
        if up is not None and claim_upload(st.session_state, up.file_id):
            if import_upload(history, up.getvalue()):
                st.rerun()


def claim_upload(state: MutableMapping[str, Any], file_id: str) -> bool:
    """True the first time a given upload is seen, False on later reruns."""
    if state.get(IMPORTED_KEY) == file_id:
        return False
    state[IMPORTED_KEY] = file_id
    return True


def import_upload(history: HistoryStore, data: bytes) -> bool:
    try:
        added = history.import_history(json.loads(data.decode("utf-8")))
    except (ValueError, RecursionError) as e:
        logger.warning(f"History import failed: {e!r}")
        st.error(f"Import failed: {e}")
        return False
    queue_toast(f"Imported {added} entries")
    return True


def render_history_panel(
    *,
    history: HistoryStore,
    tz_name: str,
    on_reapply: Callable[[HistoryEntry], None],
) -> None:
    """Saved calculations, newest first."""

    st.subheader("History")
    entries = history.load()

    if not entries:
        st.info("No saved calculations yet. Calculate, then save to keep an entry here.")
        render_export_import(history)
        return

    st.dataframe(history_frame(entries, tz_name), hide_index=True)

    labels = [_entry_label(e, tz_name) for e in entries]
    idx = st.selectbox(
        "Entry",
        list(range(len(labels))),
        format_func=lambda i: labels[i],
        key="pc_history_idx",
    )
    chosen = entries[int(idx)] if idx is not None and int(idx) < len(entries) else entries[0]

    c1, c2 = st.columns(2)
    with c1:
        st.button("↩️ Reapply", key="pc_reapply", on_click=on_reapply, args=(chosen,))
    with c2:
        st.button("🗑️ Delete", key="pc_delete", on_click=_delete_entry, args=(history, int(idx or 0)))

    render_export_import(history)
