"""Tests for SQLiteProfileRepository."""

from datetime import datetime, timezone

import pytest

from recallbot.domain.entities import (
    Channel,
    Message,
    ProfileCandidate,
    User,
    UserProfile,
)
from recallbot.infrastructure.persistence import (
    SQLiteMessageRepository,
    SQLiteProfileRepository,
)


@pytest.fixture
def repository(session_factory) -> SQLiteProfileRepository:
    """Create test repository."""
    return SQLiteProfileRepository(session_factory)


@pytest.fixture
def message_repository(session_factory) -> SQLiteMessageRepository:
    """Create message repository sharing the database."""
    return SQLiteMessageRepository(session_factory)


class TestProfileRepository:
    """SQLiteProfileRepository tests."""

    async def test_save_and_find(self, repository: SQLiteProfileRepository) -> None:
        """Test that list fields survive storage."""
        profile = UserProfile(
            user_id="U1",
            guild_id="T1",
            summary="Builds redstone contraptions.",
            personality_traits=["patient", "curious"],
            favorite_games=["Minecraft"],
            favorite_topics=["redstone"],
            communication_style="short messages",
            notable_quotes=["it works on my world"],
            analyzed_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
            message_count_analyzed=120,
        )

        await repository.save(profile)

        assert await repository.find_by_user_and_guild("U1", "T1") == profile

    async def test_save_replaces_existing(
        self, repository: SQLiteProfileRepository
    ) -> None:
        """Test that a newer analysis replaces the old one."""
        await repository.save(UserProfile(user_id="U1", guild_id="T1", summary="old"))
        await repository.save(UserProfile(user_id="U1", guild_id="T1", summary="new"))

        found = await repository.find_by_user_and_guild("U1", "T1")
        assert found is not None
        assert found.summary == "new"

    async def test_profiles_are_per_guild(
        self, repository: SQLiteProfileRepository
    ) -> None:
        """Test that profiles are scoped to a guild."""
        await repository.save(UserProfile(user_id="U1", guild_id="T1", summary="x"))

        assert await repository.find_by_user_and_guild("U1", "T2") is None


class TestFindUsersNeedingProfiles:
    """find_users_needing_profiles tests."""

    STALE_BEFORE = datetime(2024, 3, 1, tzinfo=timezone.utc)

    async def _archive(
        self,
        repository: SQLiteMessageRepository,
        user_id: str,
        count: int,
        is_bot: bool = False,
        text: str = "hello there",
    ) -> None:
        for i in range(count):
            await repository.save(
                Message(
                    id=f"{user_id}.{i}",
                    guild_id="T1",
                    channel=Channel(id="C1", name="general"),
                    user=User(id=user_id, name=user_id.lower(), is_bot=is_bot),
                    text=text,
                    timestamp=datetime(2024, 2, 1, tzinfo=timezone.utc),
                )
            )

    async def test_candidates(
        self,
        repository: SQLiteProfileRepository,
        message_repository: SQLiteMessageRepository,
    ) -> None:
        """Test selection and ordering of users who need a profile."""
        await self._archive(message_repository, "U_NEW", 10)
        await self._archive(message_repository, "U_BUSY", 15)
        await self._archive(message_repository, "U_STALE", 30)
        await self._archive(message_repository, "U_FRESH", 30)
        await self._archive(message_repository, "U_QUIET", 9)
        await self._archive(message_repository, "U_EMPTY", 12, text="")
        await self._archive(message_repository, "B_BOT", 40, is_bot=True)
        await repository.save(
            UserProfile(
                user_id="U_STALE",
                guild_id="T1",
                analyzed_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
            )
        )
        await repository.save(
            UserProfile(
                user_id="U_FRESH",
                guild_id="T1",
                analyzed_at=datetime(2024, 3, 2, tzinfo=timezone.utc),
            )
        )

        candidates = await repository.find_users_needing_profiles(
            "T1", self.STALE_BEFORE, 10
        )

        assert candidates == [
            ProfileCandidate("U_BUSY", 15),
            ProfileCandidate("U_NEW", 10),
            ProfileCandidate("U_STALE", 30, has_profile=True),
        ]

    async def test_other_guilds_ignored(
        self,
        repository: SQLiteProfileRepository,
        message_repository: SQLiteMessageRepository,
    ) -> None:
        """Test that only the requested guild's messages count."""
        await self._archive(message_repository, "U1", 10)

        assert (
            await repository.find_users_needing_profiles("T2", self.STALE_BEFORE, 10)
            == []
        )
