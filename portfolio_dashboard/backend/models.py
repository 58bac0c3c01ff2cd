"""
Data models for the Portfolio Dashboard
Holdings configuration, per-cycle snapshots and the merged value history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class HoldingConfig:
    symbol: str
    shares: float


@dataclass
class HoldingSnapshot:
    symbol: str
    shares: float
    price: float
    change: float
    previous_close: float

    @property
    def value(self) -> float:
        return self.price * self.shares

    @property
    def daily_change_amount(self) -> float:
        return self.shares * self.price * (self.change / 100)


@dataclass
class PortfolioSnapshot:
    total_value: float
    daily_change: float
    timestamp: datetime


@dataclass
class HistoryPoint:
    date: str
    value: float


@dataclass
class ErrorState:
    show: bool = False
    message: str = ""


@dataclass
class CycleResult:
    holdings: List[HoldingSnapshot]
    portfolio: PortfolioSnapshot
    history: List[HistoryPoint] = field(default_factory=list)


@dataclass
class DashboardView:
    """Read-only copy of the dashboard state handed to the presentation layer."""

    holdings: List[HoldingSnapshot]
    total_value: float
    daily_change: float
    history: List[HistoryPoint]
    is_loading: bool
    error: ErrorState
    last_updated: Optional[datetime] = None
