"""
Error types for the Portfolio Dashboard
"""

import requests

from .. import config


class DashboardError(Exception):
    """Base class for failures raised while refreshing the dashboard."""


class ConfigurationError(DashboardError):
    pass


class PerSymbolPriceError(DashboardError):
    def __init__(self, symbol: str, message: str = None):
        self.symbol = symbol
        super().__init__(message or f"No data available for {symbol}")


class HistoryFetchError(DashboardError):
    def __init__(self, symbol: str, message: str = None):
        self.symbol = symbol
        super().__init__(message or f"No historical data available for {symbol}")


class MarketDataError(DashboardError):
    def __init__(self, symbol: str, status: int = None, reason: str = None):
        self.symbol = symbol
        self.status = status
        detail = f"status {status}" if status is not None else (reason or "no response")
        super().__init__(f"Market data request failed for {symbol} ({detail})")


class RateLimitError(DashboardError):
    status_code = 429

    def __init__(self, symbol: str = None):
        self.symbol = symbol
        super().__init__(config.RATE_LIMIT_MESSAGE)


def user_message(exc: BaseException) -> str:
    """Message shown in the error banner for a failed refresh cycle."""
    if isinstance(exc, RateLimitError):
        return config.RATE_LIMIT_MESSAGE
    response = getattr(exc, "response", None)
    if getattr(response, "status_code", None) == 429:
        return config.RATE_LIMIT_MESSAGE
    if isinstance(exc, requests.RequestException):
        status = getattr(response, "status_code", None)
        return f"Market data request failed ({status})" if status else config.GENERIC_ERROR_MESSAGE
    return str(exc) or config.GENERIC_ERROR_MESSAGE
