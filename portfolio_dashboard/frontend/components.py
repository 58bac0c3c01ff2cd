"""
UI Components for the Portfolio Dashboard
Contains reusable Streamlit components and layout elements.
"""

from datetime import datetime
from typing import Callable, Optional, Tuple

import streamlit as st

from .. import config
from ..backend import models

COLORS = config.COLORS


def get_global_styles() -> str:
    return f"""
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;600&display=swap');
    html, body, [class*="css"] {{ font-family: 'Space Grotesk', sans-serif; }}
    .stApp {{ background: linear-gradient(135deg, #f5f7fa 0%, #c3cfe2 100%); }}
    .metrics-card {{
        background: rgba(255, 255, 255, 0.9);
        border-radius: 16px;
        box-shadow: 0 8px 32px 0 rgba(31, 38, 135, 0.15);
        padding: 18px 22px;
        flex: 1;
    }}
    </style>
    """


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def format_change_pct(change: float) -> str:
    return f"{'+' if change > 0 else ''}{change:.2f}%"


def build_metrics_bar_html(total_value: str, daily_change: float, holdings: int) -> str:
    up = daily_change >= 0
    change_color = COLORS["positive"] if up else COLORS["negative"]
    arrow = "&#9650;" if up else "&#9660;"

    def card(label: str, body: str, accent: str) -> str:
        return (
            f'<div class="metrics-card">'
            f'<div style="color:{COLORS["text_secondary"]};font-size:0.85rem;">{label}</div>'
            f'<div style="color:{accent};font-size:1.5rem;font-weight:600;">{body}</div>'
            f"</div>"
        )

    cards = [
        card("Total Portfolio Value", total_value, COLORS["text"]),
        card("Daily Change", f"{format_currency(abs(daily_change))} {arrow}", change_color),
        card("Total Holdings", str(holdings), COLORS["text"]),
    ]
    return f'<div style="display:flex;gap:18px;margin-bottom:24px;">{"".join(cards)}</div>'


def render_metrics_bar(view: models.DashboardView) -> None:
    st.markdown(
        build_metrics_bar_html(
            total_value=format_currency(view.total_value),
            daily_change=view.daily_change,
            holdings=len(view.holdings),
        ),
        unsafe_allow_html=True,
    )


def render_header(last_updated: Optional[datetime]) -> None:
    col_title, col_time = st.columns([3, 2])
    with col_title:
        st.title("Portfolio Dashboard")
    with col_time:
        if last_updated is not None:
            st.caption(f"Last updated: {last_updated:%Y-%m-%d %H:%M:%S}")


def render_error_banner(error: models.ErrorState, on_dismiss: Callable[[], None]) -> None:
    if not error.show:
        return
    col_msg, col_btn = st.columns([6, 1])
    with col_msg:
        st.error(error.message)
    with col_btn:
        if st.button("Dismiss", key="dismiss_error"):
            on_dismiss()
            st.rerun()


def render_loading(message: str = config.LOADING_MESSAGE) -> None:
    with st.spinner(message):
        st.info(message)


def render_settings_panel() -> Tuple[bool, int, bool]:
    with st.expander("Settings", expanded=False):
        auto_refresh = st.checkbox("Auto-Refresh", value=True)
        refresh_rate = st.slider("Rate (s)", 1, 60, config.UI_REFRESH_RATE)
        manual_refresh = st.button("Manual Refresh", use_container_width=True)
    return auto_refresh, refresh_rate, manual_refresh
