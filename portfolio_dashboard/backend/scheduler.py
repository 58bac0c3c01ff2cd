"""
Poll scheduler for the Portfolio Dashboard
Fires a refresh immediately and then on a fixed interval until stopped.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .. import config

log = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
STOPPED = "stopped"


class PollScheduler:
    def __init__(self, cycle: Callable[[], Awaitable], interval: Optional[float] = None):
        self.cycle = cycle
        self.interval = interval if interval is not None else config.get_poll_interval()
        self.status = IDLE
        self.skipped_ticks = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.status == RUNNING

    @property
    def cycle_in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self) -> None:
        """Fire the first cycle now and start the interval timer. Needs a running loop."""
        if self.status == RUNNING:
            return
        if self.status == STOPPED:
            raise RuntimeError("PollScheduler cannot be restarted after stop()")
        loop = asyncio.get_running_loop()
        self.status = RUNNING
        self._timer = loop.create_task(self._tick_forever())
        log.info("Polling every %.0fs", self.interval)

    def stop(self) -> None:
        """Cancel the timer. Safe to call more than once; in-flight cycles are left to finish."""
        if self.status == STOPPED:
            return
        self.status = STOPPED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        log.info("Polling stopped")

    async def wait_idle(self) -> None:
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)

    async def _tick_forever(self) -> None:
        while self.status == RUNNING:
            self._fire()
            await asyncio.sleep(self.interval)

    def _fire(self) -> None:
        if self.cycle_in_flight:
            self.skipped_ticks += 1
            log.warning("Previous refresh still running; skipping this tick")
            return
        self._inflight = asyncio.get_running_loop().create_task(self._run_cycle())

    async def _run_cycle(self) -> None:
        try:
            await self.cycle()
        except Exception:
            log.exception("Refresh cycle raised")
