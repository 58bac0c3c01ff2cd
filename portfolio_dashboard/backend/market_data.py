"""
Market data access for the Portfolio Dashboard
Thin client over the Polygon.io aggregates endpoints.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import requests

from .. import config
from .errors import MarketDataError, RateLimitError

log = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def history_window(days: int, today: Optional[date] = None) -> Tuple[str, str]:
    end = today or utc_today()
    start = end - timedelta(days=days)
    return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)


def timestamp_to_date(ts_ms) -> str:
    return datetime.fromtimestamp(float(ts_ms) / 1000.0, tz=timezone.utc).strftime(DATE_FORMAT)


class MarketDataClient:
    def __init__(self, api_key: str, base_url: str = config.API_BASE_URL,
                 timeout: float = None, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else config.get_request_timeout()
        self.session = session or requests.Session()

    def _get_results(self, path: str, symbol: str) -> List[Dict]:
        url = f"{self.base_url}{path}"
        # Request errors carry the full URL, api key included, so only the
        # symbol and status leave this method.
        try:
            response = self.session.get(
                url,
                params={"adjusted": "true", "apiKey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("Request for %s failed: %s", symbol, type(exc).__name__)
            raise MarketDataError(symbol, reason=type(exc).__name__) from None
        if response.status_code == 429:
            log.warning("Rate limited on %s", symbol)
            raise RateLimitError(symbol)
        if response.status_code >= 400:
            log.warning("Request for %s returned status %s", symbol, response.status_code)
            raise MarketDataError(symbol, status=response.status_code)
        try:
            payload = response.json() or {}
        except ValueError:
            raise MarketDataError(symbol, reason="invalid JSON") from None
        results = payload.get("results") if isinstance(payload, dict) else None
        return results if isinstance(results, list) else []

    def get_previous_close(self, symbol: str) -> List[Dict]:
        """Previous trading day bar for ``symbol``; empty when the API has none."""
        return self._get_results(f"/aggs/ticker/{symbol}/prev", symbol)

    def get_daily_range(self, symbol: str, start: str, end: str) -> List[Dict]:
        """Daily bars for ``symbol`` between ``start`` and ``end`` (inclusive, YYYY-MM-DD)."""
        return self._get_results(f"/aggs/ticker/{symbol}/range/1/day/{start}/{end}", symbol)

    def close(self) -> None:
        self.session.close()
