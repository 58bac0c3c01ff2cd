"""
Chart rendering functions for the Portfolio Dashboard
Handles Plotly chart creation and rendering.
"""

from typing import List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from .. import config
from ..backend import models
from ..backend.data_processor import history_frame

CHART_HEIGHTS = config.CHART_HEIGHTS
COLORS = config.COLORS


def build_history_figure(history_df: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=history_df["date"],
        y=history_df["value"],
        mode="lines+markers",
        name="Portfolio Value",
        line=dict(color=COLORS["primary"], width=3, shape="spline"),
        marker=dict(size=6, color="white", line=dict(color=COLORS["primary"], width=2)),
        fill="tozeroy",
        fillcolor="rgba(136, 132, 216, 0.15)",
        hovertemplate="%{x|%Y-%m-%d}<br>$%{y:,.2f}<extra>Portfolio Value</extra>",
    ))
    fig.update_layout(
        template="plotly_white",
        height=CHART_HEIGHTS.get("history", 400),
        margin=dict(l=10, r=10, t=10, b=10),
        showlegend=True,
        legend=dict(orientation="h", y=-0.15),
        xaxis=dict(type="date"),
    )
    fig.update_yaxes(tickprefix="$", tickformat=",.0f", gridcolor="#ccc")
    return fig


def render_history_chart(history: List[models.HistoryPoint]) -> None:
    st.markdown("##### Portfolio Performance")
    df = history_frame(history)
    if df.empty:
        st.info("Waiting for history data...")
        return
    st.plotly_chart(build_history_figure(df), use_container_width=True, key="portfolio_history")
