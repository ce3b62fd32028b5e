"""Periodic sweep of expired follow-up windows."""

import asyncio
import logging

from recallbot.application.services.follow_up_tracker import FollowUpTracker

logger = logging.getLogger(__name__)


class WindowSweeper:
    """Periodic sweep service.

    Calls ``FollowUpTracker.evict_expired()`` at a fixed interval,
    independent of message traffic, so idle windows are released even
    when nobody is talking. Runs as an asyncio task and shuts down
    gracefully on stop signal.
    """

    def __init__(
        self,
        tracker: FollowUpTracker,
        interval_seconds: float = 60.0,
    ) -> None:
        """Initialize WindowSweeper.

        Args:
            tracker: Tracker whose expired windows are swept.
            interval_seconds: Seconds between sweeps.
        """
        self._tracker = tracker
        self._interval_seconds = interval_seconds
        # set() means "stop signal active" (not running)
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def start(self) -> None:
        """Start sweeping until stop() is called.

        If already running, this method returns immediately after logging
        a warning.
        """
        if not self._stop_event.is_set():
            logger.warning("WindowSweeper.start() called while already running")
            return
        self._stop_event.clear()

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self._interval_seconds
                )
                break  # Stop signal received
            except asyncio.TimeoutError:
                pass

            try:
                await self._tracker.evict_expired()
            except Exception as e:
                logger.error("Follow-up window sweep failed: %s", e)

    async def stop(self) -> None:
        """Signal the sweep loop to stop."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if the sweeper is running."""
        return not self._stop_event.is_set()
