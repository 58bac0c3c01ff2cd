"""
Main Streamlit application for the Portfolio Dashboard
"""

import atexit
import os
import sys
import time

import streamlit as st
from dotenv import load_dotenv

try:
    from . import config
    from .logger import setup_logger
    from .backend.session_manager import DashboardSession
    from .frontend.components import (
        get_global_styles,
        render_error_banner,
        render_header,
        render_loading,
        render_metrics_bar,
        render_settings_panel,
    )
    from .frontend.charts import render_history_chart
    from .frontend.tables import render_holdings_table
except ImportError:
    sys.path.append(os.path.dirname(os.path.dirname(__file__)))
    from portfolio_dashboard import config
    from portfolio_dashboard.logger import setup_logger
    from portfolio_dashboard.backend.session_manager import DashboardSession
    from portfolio_dashboard.frontend.components import (
        get_global_styles,
        render_error_banner,
        render_header,
        render_loading,
        render_metrics_bar,
        render_settings_panel,
    )
    from portfolio_dashboard.frontend.charts import render_history_chart
    from portfolio_dashboard.frontend.tables import render_holdings_table


@st.cache_resource
def get_dashboard_session() -> DashboardSession:
    session = DashboardSession().mount()
    atexit.register(session.unmount, 5.0)
    return session


def main() -> None:
    load_dotenv(config.ENV_FILE)
    setup_logger()
    st.set_page_config(**config.PAGE_CONFIG)
    st.markdown(get_global_styles(), unsafe_allow_html=True)

    session = get_dashboard_session()
    view = session.state.view()

    if view.is_loading and not view.holdings:
        render_loading()
        time.sleep(1)
        st.rerun()
        return

    col_head, col_settings = st.columns([6, 1])
    with col_head:
        render_header(view.last_updated)
    with col_settings:
        auto_refresh, refresh_rate, manual_refresh = render_settings_panel()
        if manual_refresh:
            st.rerun()

    render_error_banner(view.error, session.state.dismiss_error)
    render_metrics_bar(view)
    render_history_chart(view.history)
    st.markdown("---")
    render_holdings_table(view.holdings)

    if auto_refresh:
        time.sleep(refresh_rate)
        st.rerun()


if __name__ == "__main__":
    main()
