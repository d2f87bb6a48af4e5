"""Background refresh loop that rebuilds and publishes the APK page."""

import asyncio
import logging
import time
from contextlib import suppress
from enum import Enum
from typing import Awaitable, Callable, Optional

from apk_list import metrics
from apk_list.ingest.base import CatalogFetcher
from apk_list.ranking.categorizer import categorize
from apk_list.ranking.ranker import rank_groups
from apk_list.render.page_builder import PageBuilder
from apk_list.worker.page_cache import PageCache, PageSnapshot

logger = logging.getLogger(__name__)

# In seconds
UPDATE_INTERVAL = 7200
RETRY_INTERVAL = 5


class RefreshState(str, Enum):
    REFRESHING = "refreshing"
    WAITING = "waiting"


class PageRefresher:
    """
    Fetches, ranks, renders and publishes the page on a fixed cadence.

    The loop alternates between two states:
    - REFRESHING: one fetch -> categorize -> rank -> render attempt. A new
      snapshot is published only when every step succeeds.
    - WAITING: sleeps UPDATE_INTERVAL after a success, RETRY_INTERVAL after a
      failure, then refreshes again.

    Failed cycles are logged and retried forever; the published page is left
    untouched. The loop runs until its stop event is set.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        builder: PageBuilder,
        cache: PageCache,
        update_interval: float = UPDATE_INTERVAL,
        retry_interval: float = RETRY_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.builder = builder
        self.cache = cache
        self.update_interval = update_interval
        self.retry_interval = retry_interval
        self.state = RefreshState.WAITING
        self._sleep = sleep
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    async def refresh_once(self) -> bool:
        """
        Run one refresh cycle.

        Returns:
            True if a new snapshot was published, False if the cycle failed
        """
        started = time.monotonic()
        logger.info("Updating APK list...")
        try:
            logger.info("Fetching list of products...")
            products = await self.fetcher.fetch_all_products()

            logger.info("Categorizing products...")
            groups = categorize(products)

            logger.info("Sorting...")
            ranked = rank_groups(groups)

            logger.info("Rendering...")
            body = await asyncio.to_thread(self.builder.build, ranked)
        except Exception as exc:
            metrics.record_refresh_error(time.monotonic() - started)
            logger.error(f"Failed to update APK list: {exc}", exc_info=True)
            return False

        snapshot = PageSnapshot(body=body)
        self.cache.publish(snapshot)

        metrics.record_refresh_success(
            time.monotonic() - started, snapshot.created_at.timestamp()
        )
        metrics.update_group_sizes({group.value: len(items) for group, items in ranked.items()})
        logger.info("Successfully updated APK list")
        return True

    async def run(self, stop_event: Optional[asyncio.Event] = None):
        """
        Refresh forever, or until ``stop_event`` is set.

        Args:
            stop_event: Optional signal that ends the loop at the next wait
        """
        while stop_event is None or not stop_event.is_set():
            self.state = RefreshState.REFRESHING
            succeeded = await self.refresh_once()

            self.state = RefreshState.WAITING
            delay = self.update_interval if succeeded else self.retry_interval
            logger.debug(f"Next refresh in {delay}s")
            await self._wait(delay, stop_event)

    async def _wait(self, delay: float, stop_event: Optional[asyncio.Event]):
        if stop_event is None:
            await self._sleep(delay)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay))
        stopper = asyncio.ensure_future(stop_event.wait())
        try:
            await asyncio.wait({sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, stopper):
                if not task.done():
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task

    def start(self) -> asyncio.Task:
        """Spawn the refresh loop as a background task."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event), name="page-refresher")
        logger.info(
            f"Page refresher started (update every {self.update_interval}s, "
            f"retry every {self.retry_interval}s)"
        )
        return self._task

    async def stop(self):
        """Signal the loop to end and wait for it."""
        if self._task is None:
            return
        self._stop_event.set()
        try:
            # Bounded: a refresh may be mid-fetch
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Page refresher did not stop in time, cancelled")
        finally:
            self._task = None
        logger.info("Page refresher stopped")
