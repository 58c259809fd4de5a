import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from .config import ExporterOptions
from .exceptions import ConnectivityError, ExporterError

logger = logging.getLogger(__name__)

ScrapeJob = Callable[[], Awaitable[None]]


class SchedulerState(str, Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPED = "stopped"


def _next_due(due: float, interval: float, now: float) -> float:
    """Advance a due time past ``now``; ticks missed while scraping are dropped."""
    due += interval
    while due <= now:
        due += interval
    return due


class Scheduler:
    """
    Drives the node capacity scrape and the metrics-server usage scrape on two
    independent intervals from a single asyncio task.

    Scrapes run one at a time inside the loop, each bounded by the configured
    scrape timeout. Setting ``shutdown`` (or calling stop()) ends the loop.
    """

    def __init__(
        self,
        capacity_job: ScrapeJob,
        usage_job: ScrapeJob,
        options: Optional[ExporterOptions] = None,
        shutdown: Optional[asyncio.Event] = None,
    ):
        self.capacity_job = capacity_job
        self.usage_job = usage_job
        self.options = options or ExporterOptions()
        self.shutdown = shutdown or asyncio.Event()
        self.state = SchedulerState.INITIALIZING
        self.task: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        return self.state is SchedulerState.RUNNING

    async def _scrape(self, name: str, job: ScrapeJob) -> None:
        timeout = self.options.scrape_timeout
        try:
            await asyncio.wait_for(job(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ConnectivityError(f"scraping {name}: deadline of {timeout:g}s exceeded") from e

    async def _tick(self, name: str, job: ScrapeJob) -> None:
        logger.debug("scraping %s", name)
        try:
            await self._scrape(name, job)
        except Exception as e:
            logger.error("Error scraping %s: %s", name, e, exc_info=not isinstance(e, ExporterError))

    async def start(self) -> None:
        """
        Runs one capacity scrape and one usage scrape, then starts the
        background loop. Any failure of the initial scrapes propagates and no
        background task is created.
        """
        if self.state is not SchedulerState.INITIALIZING:
            raise RuntimeError(f"Scheduler cannot be started from state '{self.state.value}'")

        try:
            await self._scrape("nodes", self.capacity_job)
            await self._scrape("metrics server", self.usage_job)
        except BaseException:
            self.state = SchedulerState.STOPPED
            raise

        self.state = SchedulerState.RUNNING
        self.task = asyncio.create_task(self._run(), name="metrics-server-exporter-scheduler")
        logger.info(
            "Scheduler running: nodes every %gs, metrics server every %gs, timeout %gs.",
            self.options.node_scrape_interval,
            self.options.metrics_scrape_interval,
            self.options.scrape_timeout,
        )

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        next_capacity = started + self.options.node_scrape_interval
        next_usage = started + self.options.metrics_scrape_interval

        try:
            while not self.shutdown.is_set():
                delay = max(0.0, min(next_capacity, next_usage) - loop.time())
                try:
                    await asyncio.wait_for(self.shutdown.wait(), timeout=delay)
                    break
                except asyncio.TimeoutError:
                    pass

                now = loop.time()
                if now >= next_capacity:
                    await self._tick("nodes", self.capacity_job)
                    next_capacity = _next_due(next_capacity, self.options.node_scrape_interval, loop.time())
                elif now >= next_usage:
                    await self._tick("metrics server", self.usage_job)
                    next_usage = _next_due(next_usage, self.options.metrics_scrape_interval, loop.time())
        finally:
            self.state = SchedulerState.STOPPED
            logger.info("scraping stopped")

    async def stop(self) -> None:
        """Signals shutdown and cancels the loop, abandoning any in-flight scrape."""
        logger.info("Stopping scheduler...")
        self.shutdown.set()
        self.state = SchedulerState.STOPPED
        if self.task is not None:
            self.task.cancel()
            await asyncio.gather(self.task, return_exceptions=True)
            self.task = None
