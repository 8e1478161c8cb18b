"""
Fire-and-forget click accounting.

The redirect route calls ClickTracker.record() and returns straight away.
The increment runs as a detached asyncio task with its own database session,
so a slow or failing UPDATE never delays or fails the redirect.

Guarantees are deliberately weak:
- no retry on failure (the click is lost and logged)
- no ordering between increments
- pending increments are drained on shutdown, up to drain_timeout seconds
- at most max_concurrency increments hold a pooled connection at a time
"""

import asyncio
import logging
from typing import Set

from sqlalchemy.ext.asyncio import async_sessionmaker

from shortlinks.services.link_service import LinkService

logger = logging.getLogger(__name__)


class ClickTracker:
    """Spawns and keeps track of background click-count increments."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        drain_timeout: float = 5.0,
        max_concurrency: int = 2,
    ):
        """
        Args:
            session_factory: Factory for per-increment database sessions
            drain_timeout: Seconds drain() waits before cancelling leftovers
            max_concurrency: Increments allowed to hold a connection at once
        """
        self.session_factory = session_factory
        self.drain_timeout = drain_timeout
        # Leaves the rest of the pool to lookups during a burst of clicks
        self._slots = asyncio.Semaphore(max(1, max_concurrency))
        # Strong references: the event loop only keeps weak ones to tasks
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def record(self, token: str) -> asyncio.Task:
        """Schedule an increment for token. Must be called from a running loop."""
        task = asyncio.create_task(self._increment(token), name=f"click:{token}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _increment(self, token: str) -> None:
        try:
            async with self._slots:
                async with self.session_factory() as session:
                    updated = await LinkService(session).increment_click_count(token)
        except Exception:
            logger.warning("Failed to increment click count for %s", token, exc_info=True)
            return

        if not updated:
            logger.debug("No active row to count click for %s", token)

    async def drain(self) -> None:
        """
        Wait for pending increments, then cancel whatever is left.

        Called from the application's shutdown hook.
        """
        if not self._tasks:
            return

        logger.info("Waiting for %d pending click increments", len(self._tasks))
        _, still_pending = await asyncio.wait(set(self._tasks), timeout=self.drain_timeout)

        if still_pending:
            logger.warning(
                "Cancelling %d click increments still running after %.1fs",
                len(still_pending),
                self.drain_timeout,
            )
            for task in still_pending:
                task.cancel()
            await asyncio.gather(*still_pending, return_exceptions=True)
