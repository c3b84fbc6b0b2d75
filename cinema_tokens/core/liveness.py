# cinema_tokens/core/liveness.py
"""
Connectivity flag with a periodic background probe.

Request paths read the flag instead of waiting on a dead connection.
The flag is only as fresh as the probe interval; between probes a store
may still believe a dropped backend is up.
"""
import asyncio
import logging
from contextlib import suppress
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[Any]]


class ConnectivityMonitor:
    """Lock-guarded connectivity flag refreshed by a cancellable probe task"""

    def __init__(self, probe: Probe, interval: float, name: str = "store"):
        self._probe = probe
        self.interval = interval
        self.name = name
        self._connected = True
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    async def is_connected(self) -> bool:
        async with self._lock:
            return self._connected

    async def set_connected(self, value: bool) -> None:
        async with self._lock:
            if value != self._connected:
                if value:
                    logger.info(f"{self.name}: backend reachable again")
                else:
                    logger.error(f"{self.name}: backend connection lost")
            self._connected = value

    async def probe_once(self) -> bool:
        """Run one probe and store the result"""
        try:
            await self._probe()
            alive = True
        except Exception as e:
            logger.warning(f"{self.name}: liveness probe failed: {e}")
            alive = False

        await self.set_connected(alive)
        return alive

    async def _run(self) -> None:
        while True:
            await self.probe_once()
            await asyncio.sleep(self.interval)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the probe loop on the running event loop"""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"{self.name}-liveness")
        logger.debug(f"{self.name}: liveness loop started (every {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the probe loop and wait for it to finish"""
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug(f"{self.name}: liveness loop stopped")
