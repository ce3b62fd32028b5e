"""Tests for SQLiteMessageRepository."""

from datetime import datetime, timedelta, timezone

import pytest

from recallbot.domain.entities import Channel, Message, User
from recallbot.infrastructure.persistence import SQLiteMessageRepository


@pytest.fixture
def repository(session_factory) -> SQLiteMessageRepository:
    """Create test repository."""
    return SQLiteMessageRepository(session_factory)


def create_test_message(
    id: str = "1700000000.000100",
    guild_id: str = "T1",
    channel_id: str = "C1",
    user_id: str = "U1",
    user_name: str = "alice",
    is_bot: bool = False,
    text: str = "Hello, world!",
    timestamp: datetime | None = None,
    mentions: list[str] | None = None,
) -> Message:
    """Create a test Message entity."""
    return Message(
        id=id,
        guild_id=guild_id,
        channel=Channel(id=channel_id, name="general"),
        user=User(id=user_id, name=user_name, is_bot=is_bot),
        text=text,
        timestamp=timestamp or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        mentions=mentions or [],
    )


class TestSave:
    """save method tests."""

    async def test_save_new_message(self, repository: SQLiteMessageRepository) -> None:
        """Test saving a new message."""
        message = create_test_message(mentions=["U2", "U3"])

        await repository.save(message)

        found = await repository.find_by_id(message.id, message.channel.id)
        assert found is not None
        assert found.text == message.text
        assert found.guild_id == "T1"
        assert found.user.id == "U1"
        assert found.user.name == "alice"
        assert found.mentions == ["U2", "U3"]
        assert found.timestamp == message.timestamp

    async def test_save_updates_existing_message(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that save updates an edited message in place."""
        await repository.save(create_test_message(text="Original text"))
        await repository.save(create_test_message(text="Updated text"))

        found = await repository.find_by_id("1700000000.000100", "C1")
        assert found is not None
        assert found.text == "Updated text"
        stats = await repository.get_guild_stats("T1")
        assert stats.total_messages == 1

    async def test_edit_updates_search_index(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that edited content is searchable and old content is not."""
        await repository.save(create_test_message(text="playing minecraft"))
        await repository.save(create_test_message(text="playing terraria"))

        assert await repository.search("T1", "minecraft") == []
        assert len(await repository.search("T1", "terraria")) == 1


class TestDelete:
    """delete method tests."""

    async def test_delete_removes_message_and_index(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that deleted messages are gone from lookups and search."""
        await repository.save(create_test_message(text="secret minecraft base"))

        await repository.delete("1700000000.000100", "C1")

        assert await repository.find_by_id("1700000000.000100", "C1") is None
        assert await repository.search("T1", "minecraft") == []

    async def test_delete_missing_message_is_noop(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that deleting an unknown message does nothing."""
        await repository.delete("missing", "C1")


class TestSearch:
    """search method tests."""

    async def test_search_matches_any_term(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that any query term matches."""
        await repository.save(create_test_message(id="1", text="minecraft tonight?"))
        await repository.save(create_test_message(id="2", text="terraria is better"))
        await repository.save(create_test_message(id="3", text="going to bed"))

        results = await repository.search("T1", "minecraft terraria")

        assert {m.id for m in results} == {"1", "2"}

    async def test_search_is_scoped_to_guild(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that other guilds' messages are never returned."""
        await repository.save(create_test_message(id="1", text="minecraft"))
        await repository.save(
            create_test_message(id="2", guild_id="T2", text="minecraft")
        )

        results = await repository.search("T1", "minecraft")

        assert [m.id for m in results] == ["1"]

    async def test_search_filters_by_author(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that author_id restricts results to one author."""
        await repository.save(create_test_message(id="1", text="minecraft"))
        await repository.save(
            create_test_message(id="2", user_id="U2", user_name="bob", text="minecraft")
        )

        results = await repository.search("T1", "minecraft", author_id="U2")

        assert [m.user.id for m in results] == ["U2"]

    async def test_search_respects_limit(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that limit caps the result count."""
        for i in range(5):
            await repository.save(create_test_message(id=str(i), text="minecraft"))

        assert len(await repository.search("T1", "minecraft", limit=3)) == 3

    async def test_search_without_usable_terms(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that queries with no usable terms return nothing."""
        await repository.save(create_test_message(text="ok"))

        assert await repository.search("T1", "ok") == []
        assert await repository.search("T1", "") == []

    async def test_search_handles_fts_syntax_characters(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that FTS operators in user text are treated as words."""
        await repository.save(create_test_message(text="NOT near the castle"))

        results = await repository.search("T1", 'castle" NOT near*')

        assert len(results) == 1

    async def test_recall_question_counts_only_topic_messages(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that question filler words do not match unrelated messages."""
        for i in range(3):
            await repository.save(
                create_test_message(id=f"m{i}", text=f"minecraft build {i} is done")
            )
        for i in range(20):
            await repository.save(
                create_test_message(
                    id=f"f{i}", text="did you see that many times before lol"
                )
            )

        results = await repository.search(
            "T1", "how many times did alice mention minecraft", 200, author_id="U1"
        )

        assert sorted(m.id for m in results) == ["m0", "m1", "m2"]


class TestFinders:
    """Recent and time-window finder tests."""

    async def test_find_recent_by_channel_newest_first(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test recent channel messages come newest first."""
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        for i in range(3):
            await repository.save(
                create_test_message(
                    id=str(i), text=f"m{i}", timestamp=base + timedelta(minutes=i)
                )
            )

        results = await repository.find_recent_by_channel("C1", limit=2)

        assert [m.text for m in results] == ["m2", "m1"]

    async def test_find_recent_by_user_skips_empty(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test that empty messages are skipped for user history."""
        await repository.save(create_test_message(id="1", text=""))
        await repository.save(create_test_message(id="2", text="hi"))
        await repository.save(create_test_message(id="3", user_id="U2", text="yo"))

        results = await repository.find_recent_by_user("U1", "T1")

        assert [m.id for m in results] == ["2"]

    async def test_find_by_channel_since_oldest_first(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test the channel time window is inclusive and oldest first."""
        since = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        await repository.save(
            create_test_message(id="1", timestamp=since - timedelta(seconds=1))
        )
        await repository.save(create_test_message(id="2", timestamp=since))
        await repository.save(
            create_test_message(id="3", timestamp=since + timedelta(hours=1))
        )

        results = await repository.find_by_channel_since("C1", since)

        assert [m.id for m in results] == ["2", "3"]

    async def test_find_by_guild_since_spans_channels(
        self, repository: SQLiteMessageRepository
    ) -> None:
        """Test the guild time window covers every channel."""
        since = datetime(2024, 3, 1, tzinfo=timezone.utc)
        await repository.save(create_test_message(id="1", channel_id="C1"))
        await repository.save(create_test_message(id="2", channel_id="C2"))

        results = await repository.find_by_guild_since("T1", since)

        assert {m.channel.id for m in results} == {"C1", "C2"}


class TestGuildStats:
    """get_guild_stats tests."""

    async def test_stats(self, repository: SQLiteMessageRepository) -> None:
        """Test counts and time range."""
        first = datetime(2023, 1, 1, tzinfo=timezone.utc)
        last = datetime(2024, 1, 1, tzinfo=timezone.utc)
        await repository.save(create_test_message(id="1", timestamp=first))
        await repository.save(create_test_message(id="2", timestamp=last))
        await repository.save(
            create_test_message(id="3", user_id="U2", timestamp=last)
        )

        stats = await repository.get_guild_stats("T1")

        assert stats.total_messages == 3
        assert stats.unique_authors == 2
        assert stats.earliest == first
        assert stats.latest == last

    async def test_empty_guild(self, repository: SQLiteMessageRepository) -> None:
        """Test an empty archive."""
        stats = await repository.get_guild_stats("T1")

        assert stats.total_messages == 0
        assert stats.earliest is None
        assert stats.latest is None
