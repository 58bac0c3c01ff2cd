"""
Configuration constants for the Portfolio Dashboard
"""

import os
from pathlib import Path
from typing import List, Optional

BASE_PATH = Path(__file__).parent.parent
ENV_FILE = BASE_PATH / ".env"

API_BASE_URL = "https://api.polygon.io/v2"
API_KEY_ENV = "POLYGON_API_KEY"
HOLDINGS_ENV = "PORTFOLIO_HOLDINGS"

POLLING_INTERVAL = 5 * 60  # seconds
HISTORY_DAYS = 90
REQUEST_TIMEOUT = 20
UI_REFRESH_RATE = 5

# Your portfolio holdings, as (symbol, shares)
HOLDINGS = [
    ("AAPL", 10),
    ("MSFT", 15),
    ("GOOGL", 8),
    ("META", 12),
    ("AMZN", 9),
    ("TSLA", 7),
    ("NVDA", 11),
    ("PLTR", 13),
    ("CSCO", 14),
    ("PEP", 16),
    ("QQQ", 17),
]

MISSING_API_KEY_MESSAGE = "API key not found"
RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please try again in a few minutes."
GENERIC_ERROR_MESSAGE = "An error occurred while fetching data"
LOADING_MESSAGE = "Loading portfolio data..."

PAGE_CONFIG = {
    "page_title": "Portfolio Dashboard",
    "page_icon": None,
    "layout": "wide",
    "initial_sidebar_state": "collapsed",
}

CHART_HEIGHTS = {
    "history": 400,
}

COLORS = {
    "primary": "#8884d8",
    "secondary": "#82ca9d",
    "positive": "#1f7a6d",
    "negative": "#b42318",
    "neutral": "#9a9a9a",
    "background": "#f7f7f5",
    "surface": "#ffffff",
    "text": "#1a1a1a",
    "text_secondary": "#6b6b6b",
}


def get_api_key() -> Optional[str]:
    return os.getenv(API_KEY_ENV) or None


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_poll_interval() -> float:
    return _env_number("DASHBOARD_POLL_SECONDS", POLLING_INTERVAL, float)


def get_history_days() -> int:
    return _env_number("DASHBOARD_HISTORY_DAYS", HISTORY_DAYS, int)


def get_request_timeout() -> float:
    return _env_number("DASHBOARD_REQUEST_TIMEOUT", REQUEST_TIMEOUT, float)


def get_log_level() -> str:
    return os.getenv("DASHBOARD_LOG_LEVEL", "INFO").upper()


def parse_holdings(raw: str) -> List[tuple]:
    """Parse ``"AAPL:10,MSFT:5"`` into ``[("AAPL", 10.0), ("MSFT", 5.0)]``.

    Raises ValueError on an empty symbol, a missing share count or a
    non-positive share count.
    """
    pairs = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        symbol, sep, shares = item.partition(":")
        symbol = symbol.strip().upper()
        if not symbol or not sep:
            raise ValueError(f"Invalid holding entry: {item!r}")
        qty = float(shares)
        if qty <= 0:
            raise ValueError(f"Shares must be positive for {symbol}")
        pairs.append((symbol, qty))
    return pairs


def get_holdings_pairs() -> List[tuple]:
    raw = os.getenv(HOLDINGS_ENV)
    if raw and raw.strip():
        return parse_holdings(raw)
    return list(HOLDINGS)
