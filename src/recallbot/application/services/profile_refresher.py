"""Periodic background generation of user profiles."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from recallbot.config import ProfileConfig
from recallbot.domain.repositories import (
    MessageRepository,
    ProfileRepository,
    UserRepository,
)
from recallbot.domain.services import ProfileAnalyzer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProfileRefreshResult:
    """Outcome of one refresh pass."""

    built: int = 0
    errors: int = 0


class ProfileRefresher:
    """Builds missing and stale user profiles for one guild.

    A pass picks every non-bot user with enough messages whose profile is
    missing or older than ``stale_after_hours`` (never-profiled users
    first) and analyzes them one at a time with a pause between calls.
    ``start()`` runs a pass after ``startup_delay_seconds`` and then every
    ``refresh_interval_hours`` until ``stop()`` is called.
    """

    def __init__(
        self,
        message_repository: MessageRepository,
        user_repository: UserRepository,
        profile_repository: ProfileRepository,
        analyzer: ProfileAnalyzer,
        config: ProfileConfig,
        guild_id: str,
        *,
        now: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize ProfileRefresher.

        Args:
            message_repository: Source of each user's recent messages.
            user_repository: Display names for the analysis prompt.
            profile_repository: Candidate selection and profile storage.
            analyzer: Produces a profile from messages.
            config: Intervals, thresholds and pacing.
            guild_id: Guild whose users are profiled.
            now: Current time (injectable for tests).
            sleep: Pause between builds (injectable for tests).
        """
        self._message_repository = message_repository
        self._user_repository = user_repository
        self._profile_repository = profile_repository
        self._analyzer = analyzer
        self._config = config
        self._guild_id = guild_id
        self._now = now
        self._sleep = sleep
        self._refreshing = False
        # set() means "stop signal active" (not running)
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def build_profile(self, user_id: str) -> bool:
        """Analyze one user and store the result.

        Args:
            user_id: User to profile.

        Returns:
            False when the user has too few messages to profile.

        Raises:
            LLMError: If the analysis call fails after retries.
        """
        messages = await self._message_repository.find_recent_by_user(
            user_id, self._guild_id, self._config.messages_per_profile
        )
        if len(messages) < self._config.min_messages:
            logger.info(
                "User %s has fewer than %d messages, skipping profile",
                user_id,
                self._config.min_messages,
            )
            return False

        user = await self._user_repository.find_by_id(user_id)
        user_name = user.label if user is not None else "Unknown"

        profile = await self._analyzer.analyze(
            user_id, self._guild_id, user_name, messages
        )
        await self._profile_repository.save(profile)
        logger.info(
            "Profile built for %s (%s): %d messages analyzed",
            user_name,
            user_id,
            len(messages),
        )
        return True

    async def refresh(self) -> ProfileRefreshResult:
        """Build every missing or stale profile.

        A failure for one user is logged and counted; the pass continues
        with the next user. Only one pass runs at a time.

        Returns:
            Number of profiles built and of failed users.
        """
        if self._refreshing:
            logger.warning("Profile refresh already in progress, skipping")
            return ProfileRefreshResult()

        self._refreshing = True
        try:
            return await self._refresh()
        finally:
            self._refreshing = False

    async def _refresh(self) -> ProfileRefreshResult:
        stale_before = self._now() - timedelta(hours=self._config.stale_after_hours)
        candidates = await self._profile_repository.find_users_needing_profiles(
            self._guild_id, stale_before, self._config.min_messages
        )
        if not candidates:
            logger.info("All profiles are up to date")
            return ProfileRefreshResult()

        logger.info(
            "Building profiles for %d users (stale threshold: %.0fh)",
            len(candidates),
            self._config.stale_after_hours,
        )

        built = 0
        errors = 0
        for index, candidate in enumerate(candidates):
            try:
                if await self.build_profile(candidate.user_id):
                    built += 1
            except Exception:
                errors += 1
                logger.exception("Failed to build profile for %s", candidate.user_id)

            if index < len(candidates) - 1:
                await self._sleep(self._config.delay_between_builds_seconds)

        logger.info("Profile refresh complete: %d built, %d errors", built, errors)
        return ProfileRefreshResult(built=built, errors=errors)

    async def start(self) -> None:
        """Refresh periodically until stop() is called.

        If already running, this method returns immediately after logging
        a warning.
        """
        if not self._stop_event.is_set():
            logger.warning("ProfileRefresher.start() called while already running")
            return
        self._stop_event.clear()

        timeout = self._config.startup_delay_seconds
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
                break  # Stop signal received
            except asyncio.TimeoutError:
                pass

            try:
                await self.refresh()
            except Exception as e:
                logger.error("Profile refresh failed: %s", e)
            timeout = self._config.refresh_interval_hours * 3600

    async def stop(self) -> None:
        """Signal the refresh loop to stop."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if the refresher is running."""
        return not self._stop_event.is_set()
