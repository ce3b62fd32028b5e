"""Follow-up conversation window manager."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from recallbot.config import FollowUpConfig
from recallbot.domain.entities import (
    ConversationTurn,
    ConversationWindow,
    TurnRole,
    window_key,
)
from recallbot.domain.repositories import SettingsRepository
from recallbot.domain.services import ContinuationClassifier

logger = logging.getLogger(__name__)

SETTING_ENABLED = "followup:enabled"
SETTING_WINDOW_SECONDS = "followup:window_seconds"
SETTING_MAX_FOLLOW_UPS = "followup:max_followups"


@dataclass(frozen=True)
class FollowUpSettings:
    """Operator-mutable follow-up settings, read on every call."""

    enabled: bool
    window_seconds: int
    max_follow_ups: int


class FollowUpTracker:
    """Tracks short-lived conversations keyed by (channel, user).

    A window opens whenever a question is answered. Later messages from
    the same user in the same channel that do not mention the bot are
    run through a continuation classifier; accepted ones keep the
    conversation going. Windows disappear after ``window_seconds`` of
    inactivity, after ``max_follow_ups`` accepted follow-ups, or when the
    registry is full and a newer window needs the slot.

    State lives in this process only. Access must stay on a single event
    loop: concurrent mutation of one key from several threads is a race.
    """

    def __init__(
        self,
        settings_repository: SettingsRepository,
        classifier: ContinuationClassifier,
        config: FollowUpConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the tracker.

        Args:
            settings_repository: Store holding the runtime-mutable settings.
            classifier: Decides whether a message continues a conversation.
            config: Capacity, cooldown and defaults for missing settings.
            clock: Monotonic seconds (injectable for tests).
        """
        self._settings_repository = settings_repository
        self._classifier = classifier
        self._config = config
        self._clock = clock
        self._windows: dict[str, ConversationWindow] = {}

    async def load_settings(self) -> FollowUpSettings:
        """Read the current settings, falling back to configured defaults.

        Returns:
            Effective settings for this call.
        """
        try:
            stored = await self._settings_repository.get_all()
        except Exception as e:
            logger.warning("Failed to read follow-up settings, using defaults: %s", e)
            stored = {}

        return FollowUpSettings(
            enabled=self._parse_bool(stored, SETTING_ENABLED, self._config.enabled),
            window_seconds=self._parse_int(
                stored, SETTING_WINDOW_SECONDS, self._config.window_seconds
            ),
            max_follow_ups=self._parse_int(
                stored, SETTING_MAX_FOLLOW_UPS, self._config.max_follow_ups
            ),
        )

    async def register_window(
        self,
        channel_id: str,
        user_id: str,
        question: str,
        answer: str,
    ) -> None:
        """Open (or replace) the window for a just-answered question.

        When the registry is full and the key is new, the least recently
        active window is evicted first. No-op while follow-ups are disabled.
        """
        settings = await self.load_settings()
        if not settings.enabled:
            return

        key = window_key(channel_id, user_id)
        if key not in self._windows and len(self._windows) >= max(
            self._config.max_active_windows, 1
        ):
            self._evict_least_recent()

        now = self._clock()
        self._windows[key] = ConversationWindow(
            channel_id=channel_id,
            user_id=user_id,
            original_question=question,
            original_answer=answer,
            created_at=now,
            last_activity_at=now,
            history=[
                ConversationTurn(TurnRole.ASKER, question),
                ConversationTurn(TurnRole.ASSISTANT, answer),
            ],
        )
        logger.debug("Follow-up window opened for %s", key)

    async def check_follow_up(
        self,
        channel_id: str,
        user_id: str,
        content: str,
    ) -> ConversationWindow | None:
        """Check whether a message continues an open conversation.

        Args:
            channel_id: Channel the message was posted in.
            user_id: Author of the message.
            content: Message text.

        Returns:
            The updated window when the message is a follow-up, else None.
        """
        settings = await self.load_settings()
        if not settings.enabled:
            return None

        key = window_key(channel_id, user_id)
        window = self._windows.get(key)
        if window is None:
            return None

        now = self._clock()
        if window.is_expired(now, settings.window_seconds):
            del self._windows[key]
            logger.debug("Follow-up window expired for %s", key)
            return None

        if window.is_exhausted(settings.max_follow_ups):
            del self._windows[key]
            logger.debug("Follow-up window max reached for %s", key)
            return None

        if window.in_cooldown(now, self._config.min_classify_interval_seconds):
            logger.debug("Follow-up classification skipped for %s (cooldown)", key)
            return None

        window.last_classified_at = now
        is_related = await self._classifier.is_follow_up(
            window.recent_turns(self._config.classification_history_turns), content
        )
        if not is_related:
            return None

        if self._windows.get(key) is not window:
            logger.debug("Follow-up window for %s closed during classification", key)
            return None

        now = self._clock()
        if window.is_expired(now, settings.window_seconds) or window.is_exhausted(
            settings.max_follow_ups
        ):
            del self._windows[key]
            logger.debug("Follow-up window for %s ran out during classification", key)
            return None

        window.accept_follow_up(content, now)
        logger.info(
            "Follow-up detected for %s (%d/%d)",
            key,
            window.follow_up_count,
            settings.max_follow_ups,
        )
        return window

    async def record_follow_up_response(
        self,
        channel_id: str,
        user_id: str,
        answer: str,
    ) -> None:
        """Append the answer to a follow-up; no-op if the window is gone."""
        window = self._windows.get(window_key(channel_id, user_id))
        if window is not None:
            window.record_answer(answer, self._clock())

    async def evict_expired(self) -> int:
        """Remove every window idle for longer than the TTL.

        Returns:
            Number of windows removed.
        """
        settings = await self.load_settings()
        now = self._clock()
        expired = [
            key
            for key, window in self._windows.items()
            if window.is_expired(now, settings.window_seconds)
        ]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug("Evicted %d expired follow-up windows", len(expired))
        return len(expired)

    def get_active_window_count(self) -> int:
        """Number of windows currently held."""
        return len(self._windows)

    def _evict_least_recent(self) -> None:
        if not self._windows:
            return
        oldest_key = min(
            self._windows, key=lambda k: self._windows[k].last_activity_at
        )
        del self._windows[oldest_key]
        logger.debug("Follow-up window evicted for %s (capacity)", oldest_key)

    @staticmethod
    def _parse_bool(stored: dict[str, str], key: str, default: bool) -> bool:
        value = stored.get(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in ("true", "false"):
            return normalized == "true"
        logger.warning("Invalid value for %s: %r, using %s", key, value, default)
        return default

    @staticmethod
    def _parse_int(stored: dict[str, str], key: str, default: int) -> int:
        value = stored.get(key)
        if value is None:
            return default
        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid value for %s: %r, using %s", key, value, default)
            return default
        if parsed < 0:
            logger.warning("Negative value for %s: %r, using %s", key, value, default)
            return default
        return parsed
