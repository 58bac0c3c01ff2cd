"""
Data processing and calculation functions for the Portfolio Dashboard
Normalizes per-symbol API results and reduces them to portfolio totals and history.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .. import config
from . import models
from .errors import ConfigurationError, HistoryFetchError, PerSymbolPriceError
from .market_data import timestamp_to_date

log = logging.getLogger(__name__)


def load_holdings() -> List[models.HoldingConfig]:
    try:
        pairs = config.get_holdings_pairs()
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return [models.HoldingConfig(symbol=symbol, shares=float(shares)) for symbol, shares in pairs]


def compute_change(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return ((current - previous) / previous) * 100


def degraded_snapshot(holding: models.HoldingConfig) -> models.HoldingSnapshot:
    return models.HoldingSnapshot(
        symbol=holding.symbol,
        shares=holding.shares,
        price=0.0,
        change=0.0,
        previous_close=0.0,
    )


def build_holding_snapshot(holding: models.HoldingConfig, results: List[Dict]) -> models.HoldingSnapshot:
    if not results:
        raise PerSymbolPriceError(holding.symbol)
    try:
        close = float(results[0]["c"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PerSymbolPriceError(holding.symbol, f"Malformed price data for {holding.symbol}") from exc

    # The previous-close endpoint is the only price source, so both sides
    # of the change come from the same bar.
    previous_close = close
    current_price = close
    return models.HoldingSnapshot(
        symbol=holding.symbol,
        shares=holding.shares,
        price=current_price,
        change=compute_change(current_price, previous_close),
        previous_close=previous_close,
    )


def summarize_portfolio(snapshots: Iterable[models.HoldingSnapshot],
                        timestamp: Optional[datetime] = None) -> models.PortfolioSnapshot:
    snapshots = list(snapshots)
    total = sum(s.value for s in snapshots)
    change = sum(s.daily_change_amount for s in snapshots)
    return models.PortfolioSnapshot(
        total_value=total,
        daily_change=change,
        timestamp=timestamp or datetime.now(),
    )


def history_points(holding: models.HoldingConfig, results: List[Dict]) -> List[models.HistoryPoint]:
    if not results:
        raise HistoryFetchError(holding.symbol)
    points = []
    for bar in results:
        try:
            day = timestamp_to_date(bar["t"])
            value = float(bar["c"]) * holding.shares
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
            log.warning("Malformed bar for %s: %r", holding.symbol, bar)
            raise HistoryFetchError(holding.symbol, f"Malformed historical data for {holding.symbol}") from exc
        points.append(models.HistoryPoint(date=day, value=value))
    return points


def merge_history(series: Iterable[Iterable[models.HistoryPoint]]) -> List[models.HistoryPoint]:
    """Sum every symbol's daily contribution into one point per date, ascending."""
    by_date: Dict[str, models.HistoryPoint] = {}
    for symbol_history in series:
        for point in symbol_history:
            existing = by_date.get(point.date)
            if existing is None:
                by_date[point.date] = models.HistoryPoint(date=point.date, value=point.value)
            else:
                existing.value += point.value
    return sorted(by_date.values(), key=lambda p: p.date)


def holdings_frame(snapshots: List[models.HoldingSnapshot]) -> pd.DataFrame:
    rows = []
    for s in snapshots:
        rows.append({
            "Symbol": s.symbol,
            "Shares": s.shares,
            "Price": s.price,
            "Value": s.value,
            "Daily Change %": s.change,
        })
    return pd.DataFrame(rows, columns=["Symbol", "Shares", "Price", "Value", "Daily Change %"])


def history_frame(history: List[models.HistoryPoint]) -> pd.DataFrame:
    if not history:
        return pd.DataFrame(columns=["date", "value"])
    df = pd.DataFrame([{"date": p.date, "value": p.value} for p in history])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df.dropna(subset=["date"]).sort_values("date").reset_index(drop=True)
