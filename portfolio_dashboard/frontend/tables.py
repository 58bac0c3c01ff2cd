"""
Table rendering functions for the Portfolio Dashboard
Handles DataFrame display and formatting.
"""

from typing import List

import pandas as pd
import streamlit as st

from ..backend import models
from ..backend.data_processor import holdings_frame
from .components import format_change_pct, format_currency


def format_holdings_frame(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    out = df.copy()
    out["Price"] = out["Price"].map(format_currency)
    out["Value"] = out["Value"].map(format_currency)
    out["Daily Change %"] = out["Daily Change %"].map(format_change_pct)
    return out.rename(columns={"Daily Change %": "Daily Change"})


def render_holdings_table(holdings: List[models.HoldingSnapshot]) -> None:
    st.markdown("##### Current Holdings")
    df = holdings_frame(holdings)
    if df.empty:
        st.info("No Current Holdings")
        return
    st.dataframe(format_holdings_frame(df), use_container_width=True, hide_index=True)
