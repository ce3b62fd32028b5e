"""Slack channel initializer for syncing channels at startup."""

import logging

from slack_sdk.web.async_client import AsyncWebClient

from recallbot.domain.entities import Channel
from recallbot.domain.repositories import ChannelRepository

logger = logging.getLogger(__name__)


class SlackChannelInitializer:
    """Initializes channel names from the Slack API at startup.

    Channel names are shown next to archived messages in the model's
    context; message events only carry channel IDs.
    """

    def __init__(
        self,
        client: AsyncWebClient,
        channel_repository: ChannelRepository,
    ) -> None:
        self._client = client
        self._channel_repository = channel_repository

    async def sync_channels(self) -> list[Channel]:
        """Sync the channels the bot has joined into the archive.

        Returns:
            List of synced channels. Empty list if the API call fails.
        """
        try:
            channels: list[Channel] = []
            cursor: str | None = None
            while True:
                response = await self._client.users_conversations(
                    types="public_channel,private_channel",
                    cursor=cursor,
                    limit=200,
                )
                for channel_data in response.get("channels", []):
                    channel = Channel(id=channel_data["id"], name=channel_data["name"])
                    await self._channel_repository.save(channel)
                    channels.append(channel)

                cursor = response.get("response_metadata", {}).get("next_cursor")
                if not cursor:
                    break

            logger.info("Synced %d channels from Slack", len(channels))
            return channels

        except Exception as e:
            logger.warning("Failed to sync channels from Slack: %s", e)
            return []
