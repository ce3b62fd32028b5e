"""Per-guild name resolution cache."""

import logging

from recallbot.domain.entities import UserIdentity
from recallbot.domain.repositories import UserRepository

logger = logging.getLogger(__name__)


class UserDirectory:
    """Maps free-text names in a question to stored users.

    Holds the identities (account name, display name, nicknames) of every
    non-bot user of one guild. The cache is rebuilt when a different guild
    is requested or after ``invalidate()``; otherwise no storage lookups
    happen per request.
    """

    def __init__(self, user_repository: UserRepository) -> None:
        self._user_repository = user_repository
        self._guild_id: str | None = None
        self._identities: list[UserIdentity] = []

    async def identities(self, guild_id: str) -> list[UserIdentity]:
        """Return the cached identities for a guild, loading them if needed."""
        if self._guild_id != guild_id:
            self._identities = await self._user_repository.find_all_with_nicknames(
                guild_id
            )
            self._guild_id = guild_id
            logger.debug(
                "User directory rebuilt for guild %s (%d users)",
                guild_id,
                len(self._identities),
            )
        return self._identities

    async def find_named_in(self, guild_id: str, text: str) -> list[UserIdentity]:
        """Return every user whose name appears in the text.

        Args:
            guild_id: Guild to search.
            text: Free text (usually the question).

        Returns:
            Matching identities, in directory order.
        """
        return [
            identity
            for identity in await self.identities(guild_id)
            if identity.is_named_in(text)
        ]

    async def resolve_user_id(self, guild_id: str, text: str) -> str | None:
        """Return the ID of the first user named in the text, if any."""
        for identity in await self.identities(guild_id):
            if identity.is_named_in(text):
                return identity.id
        return None

    def invalidate(self) -> None:
        """Drop the cache so the next lookup reloads it."""
        self._guild_id = None
        self._identities = []
