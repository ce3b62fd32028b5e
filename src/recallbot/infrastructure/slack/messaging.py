"""Slack messaging service."""

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from recallbot.domain.exceptions import ChannelNotAccessibleError

# Error codes that indicate the channel is not accessible
_CHANNEL_NOT_ACCESSIBLE_ERRORS = frozenset(
    {
        "not_in_channel",
        "channel_not_found",
        "is_archived",
    }
)


class SlackMessagingService:
    """Slack implementation of MessagingService.

    Posts replies and resolves the bot's own identity (user ID and the
    workspace it is installed in).
    """

    def __init__(self, client: AsyncWebClient) -> None:
        """Initialize the service.

        Args:
            client: Slack AsyncWebClient instance.
        """
        self._client = client
        self._bot_user_id: str | None = None
        self._team_id: str | None = None

    async def send_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> None:
        """Send a message to a Slack channel.

        Args:
            channel_id: Target channel ID.
            text: Message content.
            thread_ts: Thread timestamp for thread replies.

        Raises:
            ChannelNotAccessibleError: If the channel is not accessible
                (not_in_channel, channel_not_found, is_archived).
            SlackApiError: If the API call fails for other reasons.
        """
        try:
            await self._client.chat_postMessage(
                channel=channel_id,
                text=text,
                thread_ts=thread_ts,
            )
        except SlackApiError as e:
            error_code = e.response.get("error", "") if e.response is not None else ""
            if error_code in _CHANNEL_NOT_ACCESSIBLE_ERRORS:
                raise ChannelNotAccessibleError(
                    channel_id, f"Cannot access channel {channel_id}: {error_code}"
                ) from e
            raise

    async def get_bot_user_id(self) -> str:
        """Get the bot's user ID (cached after the first call)."""
        if self._bot_user_id is None:
            await self._load_identity()
        assert self._bot_user_id is not None
        return self._bot_user_id

    async def get_team_id(self) -> str:
        """Get the workspace ID the bot is installed in (cached)."""
        if self._team_id is None:
            await self._load_identity()
        assert self._team_id is not None
        return self._team_id

    async def _load_identity(self) -> None:
        response = await self._client.auth_test()
        self._bot_user_id = response["user_id"]
        self._team_id = response["team_id"]
