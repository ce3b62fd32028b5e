"""Message entity."""

from dataclasses import dataclass, field
from datetime import datetime

from recallbot.domain.entities.channel import Channel
from recallbot.domain.entities.user import User


@dataclass(frozen=True)
class Message:
    """Archived chat message.

    Attributes:
        id: Platform-specific message ID.
        guild_id: Workspace (guild) the message belongs to.
        channel: Channel where the message was posted.
        user: User who sent the message.
        text: Message content.
        timestamp: When the message was sent.
        mentions: List of user IDs mentioned in the message.
    """

    id: str
    guild_id: str
    channel: Channel
    user: User
    text: str
    timestamp: datetime
    mentions: list[str] = field(default_factory=list)

    def mentions_user(self, user_id: str) -> bool:
        """Check if a user is mentioned in this message.

        Args:
            user_id: The user ID to check.

        Returns:
            True if the user is mentioned.
        """
        return user_id in self.mentions
