"""
Refresh loop module
Periodically fetches devices from the cloud API and updates the metric state
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from .client import NatureRemoClient
from .exceptions import RefreshError
from .metrics import MetricState

logger = logging.getLogger(__name__)


class Refresher:
    """
    Runs fetch-and-update cycles: one immediately, then one per interval.

    A failed cycle is logged and skipped; the previous values stay published.
    With stop_on_error the loop instead ends after the first failed periodic
    cycle.
    """

    def __init__(
        self,
        client: NatureRemoClient,
        state: MetricState,
        interval: float,
        stop_on_error: bool = False
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.client = client
        self.state = state
        self.interval = interval
        self.stop_on_error = stop_on_error

        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

        # Loop state for health monitoring
        self.status = {
            "running": False,
            "last_run": None,
            "last_success": None,
            "last_error": None,
            "consecutive_errors": 0,
        }

    async def refresh_once(self):
        """
        Run one cycle: fetch the device list, then update the metric state.

        Raises:
            RefreshError: fetching or updating failed
        """
        self.status["last_run"] = datetime.now(timezone.utc)
        with self.state.refresh_duration.time():
            try:
                # Blocking HTTP call runs in a worker thread so /metrics stays responsive
                devices = await asyncio.to_thread(self.client.get_devices)
            except Exception as e:
                raise RefreshError(f"failed to get all devices from Nature Remo API: {e}") from e

            try:
                self.state.update(devices)
            except Exception as e:
                raise RefreshError(f"failed to set metrics: {e}") from e

        self.status["last_success"] = datetime.now(timezone.utc)
        self.status["last_error"] = None
        self.status["consecutive_errors"] = 0

    async def _cycle(self) -> bool:
        """Run one cycle, logging instead of raising. Returns True on success."""
        try:
            await self.refresh_once()
        except RefreshError as e:
            self.status["last_error"] = str(e)
            self.status["consecutive_errors"] += 1
            self.state.refresh_failures.inc()
            logger.error(str(e))
            return False

        logger.debug("metrics updated")
        return True

    async def run(self, stop_event: asyncio.Event):
        """
        Refresh until stop_event is set.

        A cycle that has started always runs to completion; the stop event is
        only checked while waiting for the next tick.
        """
        self.status["running"] = True
        logger.info(f"Starting refresh loop (interval: {self.interval}s)")
        try:
            await self._cycle()

            while True:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
                else:
                    logger.info("shutting down")
                    return

                if not await self._cycle() and self.stop_on_error:
                    logger.warning("Refresh loop stopped after failed cycle (stop_on_error enabled)")
                    return
        finally:
            self.status["running"] = False

    def start(self) -> asyncio.Task:
        """Start the refresh loop as a background task"""
        if self._task is not None and not self._task.done():
            logger.warning("Refresh loop already running")
            return self._task

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event), name="nature-remo-refresher")
        return self._task

    async def stop(self):
        """Signal the loop to stop and wait for the current cycle to finish"""
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None
            self._stop_event = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
