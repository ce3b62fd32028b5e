"""Slack event adapter."""

import logging
import re
from datetime import datetime, timezone
from typing import Any

from slack_sdk.web.async_client import AsyncWebClient

from recallbot.application.services import UserDirectory
from recallbot.domain.entities import Channel, Message, User
from recallbot.domain.repositories import ChannelRepository, UserRepository

logger = logging.getLogger(__name__)


class SlackEventAdapter:
    """Convert Slack events to domain entities.

    This adapter translates Slack message payloads into
    platform-independent domain entities. The Slack workspace (team)
    acts as the guild. Users are looked up in the archive first and
    fetched from the Slack API only when unknown; their real names are
    recorded as nicknames for name matching.
    """

    MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")

    def __init__(
        self,
        client: AsyncWebClient,
        user_repository: UserRepository,
        channel_repository: ChannelRepository,
        default_team_id: str,
        user_directory: UserDirectory | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Slack AsyncWebClient for fetching user info.
            user_repository: Archive of known users.
            channel_repository: Archive of known channels.
            default_team_id: Guild used when an event carries no team.
            user_directory: Name cache to invalidate when users change.
        """
        self._client = client
        self._user_repository = user_repository
        self._channel_repository = channel_repository
        self._default_team_id = default_team_id
        self._user_directory = user_directory

    async def to_message(self, event: dict[str, Any]) -> Message:
        """Convert a Slack message event to a Message entity.

        Args:
            event: Slack message event payload.

        Returns:
            Message entity.
        """
        guild_id = event.get("team") or self._default_team_id
        user = await self._get_or_fetch_user(event, guild_id)

        channel = Channel(id=event["channel"], name="")
        await self._channel_repository.save(channel)

        ts = event["ts"]
        text = event.get("text", "")

        return Message(
            id=ts,
            guild_id=guild_id,
            channel=channel,
            user=user,
            text=text,
            timestamp=datetime.fromtimestamp(float(ts), tz=timezone.utc),
            mentions=self.extract_mentions(text),
        )

    async def _get_or_fetch_user(self, event: dict[str, Any], guild_id: str) -> User:
        """Get user from the archive or fetch it from the Slack API.

        Args:
            event: Slack message event payload.
            guild_id: Guild the message belongs to.

        Returns:
            User entity.
        """
        user_id = event.get("user") or event.get("bot_id")
        if user_id is None:
            return User(
                id="unknown", name=event.get("username", "unknown"), is_bot=True
            )

        cached_user = await self._user_repository.find_by_id(user_id)
        if cached_user is not None:
            return cached_user

        if "user" not in event:
            user = User(id=user_id, name=event.get("username", user_id), is_bot=True)
            await self._user_repository.save(user)
            return user

        user_info = await self._client.users_info(user=user_id)
        user_data = user_info["user"]
        profile = user_data.get("profile", {})

        user = User(
            id=user_data["id"],
            name=user_data["name"],
            display_name=profile.get("display_name") or None,
            is_bot=user_data.get("is_bot", False),
        )
        await self._user_repository.save(user)

        real_name = profile.get("real_name") or user_data.get("real_name")
        if real_name and real_name not in (user.name, user.display_name):
            await self._user_repository.add_nickname(user.id, guild_id, real_name)

        if self._user_directory is not None:
            self._user_directory.invalidate()
        logger.debug("Fetched new user %s (%s)", user.id, user.label)

        return user

    def extract_mentions(self, text: str) -> list[str]:
        """Extract user mentions from message text.

        Args:
            text: Message text.

        Returns:
            List of mentioned user IDs.
        """
        return self.MENTION_PATTERN.findall(text)
