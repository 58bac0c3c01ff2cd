"""
Session management for the Portfolio Dashboard
Runs the poll scheduler on a background event loop for the lifetime of a mounted view.
"""

import asyncio
import logging
import threading
from typing import Optional

from .fetcher import PortfolioFetcher
from .scheduler import PollScheduler
from .state import DashboardState

log = logging.getLogger(__name__)


class DashboardSession:
    def __init__(self, fetcher: Optional[PortfolioFetcher] = None, interval: Optional[float] = None):
        self.state = fetcher.state if fetcher is not None else DashboardState()
        self.fetcher = fetcher or PortfolioFetcher(self.state)
        self.scheduler = PollScheduler(self.fetcher.refresh, interval=interval)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._unmounted = False

    @property
    def mounted(self) -> bool:
        return self._thread is not None and not self._unmounted

    def mount(self) -> "DashboardSession":
        with self._lock:
            if self._thread is not None or self._unmounted:
                return self
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=self._run_loop, name="portfolio-poller", daemon=True)
            self._thread.start()
            self._loop.call_soon_threadsafe(self.scheduler.start)
        return self

    def unmount(self, timeout: Optional[float] = None) -> None:
        """Stop polling and detach the state. Idempotent."""
        with self._lock:
            if self._unmounted:
                return
            self._unmounted = True
            self.state.close()
            if self._loop is None:
                return
            asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop)
            thread = self._thread
        if timeout is not None and thread is not None:
            thread.join(timeout)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()
            log.debug("Poller loop closed")

    async def _shutdown(self) -> None:
        self.scheduler.stop()
        await self.scheduler.wait_idle()
        # let the cancelled timer task unwind before the loop stops
        await asyncio.sleep(0)
        asyncio.get_running_loop().stop()
