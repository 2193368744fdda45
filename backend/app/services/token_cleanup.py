"""Token cleanup service - periodically purges expired blacklist entries."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.services.token_blacklist import TokenBlacklistService

logger = get_logger("token_cleanup")

# How often to run cleanup (in seconds)
CLEANUP_INTERVAL_SECONDS = 3600  # 1 hour


class TokenCleanupService:
    """Background task that removes blacklist rows past their expiry.

    One cycle runs at start, then the loop waits interval_seconds after
    each cycle finishes. stop() wakes the wait immediately.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
    ):
        self._session_factory = session_factory
        self._interval_seconds = interval_seconds
        self._running = False
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def interval_seconds(self) -> int:
        return self._interval_seconds

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background cleanup task."""
        if self._running:
            logger.warning("Token cleanup service is already running")
            return

        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._cleanup_loop(), name="token-blacklist-cleanup")
        logger.info(f"Token cleanup service started (interval: {self._interval_seconds}s)")

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it."""
        self._running = False
        self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Token cleanup service stopped")

    async def _cleanup_loop(self) -> None:
        """Main loop: purge, then wait for the interval or the stop signal."""
        while self._running:
            try:
                await self._run_cleanup()
            except Exception as e:
                logger.exception(f"Error in token blacklist cleanup: {e}")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                continue

    async def _run_cleanup(self) -> int:
        """Execute a single cleanup run in its own session."""
        async with self._session_factory() as db:
            removed = await TokenBlacklistService(db).purge_expired()

        if removed > 0:
            logger.info(f"Token cleanup removed {removed} expired blacklist entries")
        else:
            logger.debug("Token cleanup completed, nothing to remove")
        return removed

    async def run_cleanup_now(self) -> int:
        """Manually trigger a cleanup run.

        Returns:
            Number of blacklist entries deleted
        """
        return await self._run_cleanup()
