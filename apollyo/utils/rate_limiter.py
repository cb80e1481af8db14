"""Fixed-window request limiter keyed by client."""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..errors import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    reset_time: float


class RateLimiter:
    """Allows ``limit`` requests per client per ``window`` seconds.

    Call ``start()`` inside a running event loop to sweep expired windows
    every ``sweep_interval`` seconds, and ``stop()`` on shutdown.
    """

    def __init__(
        self,
        limit: int = 10,
        window: float = 60.0,
        sweep_interval: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self.limit = limit
        self.window = window
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def check(self, client_id: str = 'unknown'):
        """Count one request; raise RateLimitError if the client is over the limit."""
        now = self._clock()
        record = self._windows.get(client_id)

        if record is None or now > record.reset_time:
            self._windows[client_id] = _Window(count=1, reset_time=now + self.window)
            return

        if record.count >= self.limit:
            retry_after = max(1, math.ceil(record.reset_time - now))
            raise RateLimitError(client_id, retry_after)

        record.count += 1

    def remaining(self, client_id: str) -> int:
        record = self._windows.get(client_id)
        if record is None or self._clock() > record.reset_time:
            return self.limit
        return max(0, self.limit - record.count)

    def sweep(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self._clock()
        expired = [client for client, record in self._windows.items() if now > record.reset_time]
        for client in expired:
            del self._windows[client]
        if expired:
            logger.debug("Swept %d expired rate-limit windows", len(expired))
        return len(expired)

    async def _sweep_forever(self):
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start(self):
        if self._sweeper is None:
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop(self):
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        self._windows.clear()

    @property
    def running(self) -> bool:
        return self._sweeper is not None
