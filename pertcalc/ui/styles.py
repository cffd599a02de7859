from __future__ import annotations

import streamlit as st


def apply_base_styles() -> None:
    """Page config + global CSS.

    Must be the first Streamlit call on the page.
    """

    st.set_page_config(
        page_title="PERT Calculator",
        page_icon="⏱️",
        layout="centered",
    )

    st.markdown(
        """
        <style>
          .pc-card {
            border-left: 4px solid #4c8bf5;
            border-radius: 10px;
            padding: 12px 16px;
            background: rgba(76,139,245,0.06);
          }
          .pc-title { font-size: 24px; font-weight: 700; text-align: center; }
          .pc-sub { opacity: 0.8; font-size: 14px; text-align: center; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_header(title: str, subtitle: str) -> None:
    st.markdown(
        f"""
        <div class="pc-card">
          <div class="pc-title">{title}</div>
          <div class="pc-sub">{subtitle}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
