"""
Dashboard state slot for the Portfolio Dashboard
Written by the fetcher, read by the presentation layer.
"""

import threading
from datetime import datetime
from typing import List, Optional

from . import models


class DashboardState:
    def __init__(self):
        self._lock = threading.Lock()
        self._active = True
        self._holdings: List[models.HoldingSnapshot] = []
        self._total_value = 0.0
        self._daily_change = 0.0
        self._history: List[models.HistoryPoint] = []
        self._is_loading = True
        self._error = models.ErrorState()
        self._last_updated: Optional[datetime] = None

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        """Detach the slot from its view; later writes are ignored."""
        with self._lock:
            self._active = False

    def set_loading(self, loading: bool) -> None:
        with self._lock:
            if self._active:
                self._is_loading = loading

    def publish(self, result: models.CycleResult, completed_at: Optional[datetime] = None) -> bool:
        with self._lock:
            if not self._active:
                return False
            self._holdings = list(result.holdings)
            self._total_value = result.portfolio.total_value
            self._daily_change = result.portfolio.daily_change
            self._history = list(result.history)
            self._last_updated = completed_at or datetime.now()
            self._error = models.ErrorState()
            return True

    def report_error(self, message: str) -> bool:
        with self._lock:
            if not self._active:
                return False
            self._error = models.ErrorState(show=True, message=message)
            self._is_loading = False
            return True

    def dismiss_error(self) -> None:
        with self._lock:
            self._error = models.ErrorState()

    def view(self) -> models.DashboardView:
        with self._lock:
            return models.DashboardView(
                holdings=list(self._holdings),
                total_value=self._total_value,
                daily_change=self._daily_change,
                history=list(self._history),
                is_loading=self._is_loading,
                error=models.ErrorState(show=self._error.show, message=self._error.message),
                last_updated=self._last_updated,
            )
