"""
Portfolio fetcher for the Portfolio Dashboard
Runs one refresh cycle: prices, totals, history, then a single publish.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from .. import config
from . import data_processor, models
from .errors import ConfigurationError, user_message
from .market_data import MarketDataClient, history_window
from .state import DashboardState

log = logging.getLogger(__name__)


class PortfolioFetcher:
    def __init__(
        self,
        state: DashboardState,
        holdings: Optional[List[models.HoldingConfig]] = None,
        client_factory: Callable[[str], MarketDataClient] = MarketDataClient,
        api_key_provider: Callable[[], Optional[str]] = config.get_api_key,
        history_days: Optional[int] = None,
    ):
        self.state = state
        self.holdings = holdings
        self.client_factory = client_factory
        self.api_key_provider = api_key_provider
        self.history_days = history_days

    def _resolve_holdings(self) -> List[models.HoldingConfig]:
        if self.holdings is None:
            self.holdings = data_processor.load_holdings()
        return self.holdings

    async def _price_for(self, client: MarketDataClient, holding: models.HoldingConfig) -> models.HoldingSnapshot:
        try:
            results = await asyncio.to_thread(client.get_previous_close, holding.symbol)
            return data_processor.build_holding_snapshot(holding, results)
        except Exception as exc:
            log.warning("Price unavailable for %s, valuing at 0: %s", holding.symbol, exc)
            return data_processor.degraded_snapshot(holding)

    async def fetch_prices(self, client: MarketDataClient,
                           holdings: List[models.HoldingConfig]) -> List[models.HoldingSnapshot]:
        return list(await asyncio.gather(*(self._price_for(client, h) for h in holdings)))

    async def _history_for(self, client: MarketDataClient, holding: models.HoldingConfig,
                           start: str, end: str) -> List[models.HistoryPoint]:
        results = await asyncio.to_thread(client.get_daily_range, holding.symbol, start, end)
        return data_processor.history_points(holding, results)

    async def fetch_history(self, client: MarketDataClient, holdings: List[models.HoldingConfig],
                            today: Optional[date] = None) -> List[models.HistoryPoint]:
        days = self.history_days or config.get_history_days()
        start, end = history_window(days, today)
        series = await asyncio.gather(*(self._history_for(client, h, start, end) for h in holdings))
        return data_processor.merge_history(series)

    async def fetch_cycle(self) -> models.CycleResult:
        api_key = self.api_key_provider()
        if not api_key:
            raise ConfigurationError(config.MISSING_API_KEY_MESSAGE)
        holdings = self._resolve_holdings()

        client = self.client_factory(api_key)
        try:
            snapshots = await self.fetch_prices(client, holdings)
            portfolio = data_processor.summarize_portfolio(snapshots)
            history = await self.fetch_history(client, holdings)
        finally:
            client.close()
        return models.CycleResult(holdings=snapshots, portfolio=portfolio, history=history)

    async def refresh(self) -> bool:
        """Run one cycle against the state slot. Returns True when new data was published."""
        self.state.set_loading(True)
        try:
            result = await self.fetch_cycle()
            published = self.state.publish(result, completed_at=datetime.now())
            if published:
                log.info(
                    "Portfolio refreshed: %d holdings, total %.2f, %d history points",
                    len(result.holdings), result.portfolio.total_value, len(result.history),
                )
            else:
                log.debug("Dropping refresh result for a closed dashboard")
            return published
        except Exception as exc:
            message = user_message(exc)
            log.error("Error fetching portfolio data: %s", message)
            self.state.report_error(message)
            return False
        finally:
            self.state.set_loading(False)
