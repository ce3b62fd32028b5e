"""Tests for UserDirectory."""

from unittest.mock import AsyncMock

import pytest

from recallbot.application.services import UserDirectory
from recallbot.domain.entities import UserIdentity

ALICE = UserIdentity(id="U1", username="alice", display_name="Alice W")
BOB = UserIdentity(id="U2", username="bob", nicknames=("bobby", "the builder"))


@pytest.fixture
def user_repository() -> AsyncMock:
    """User store returning two identities."""
    repository = AsyncMock()
    repository.find_all_with_nicknames.return_value = [ALICE, BOB]
    return repository


@pytest.fixture
def directory(user_repository: AsyncMock) -> UserDirectory:
    """Create a directory over the mock store."""
    return UserDirectory(user_repository)


class TestLookup:
    """Name matching tests."""

    async def test_find_named_in(self, directory: UserDirectory) -> None:
        """Every user named in the text is returned."""
        found = await directory.find_named_in("G1", "did ALICE and Bobby meet?")

        assert found == [ALICE, BOB]

    async def test_find_named_in_no_match(self, directory: UserDirectory) -> None:
        """Unknown names match nothing."""
        assert await directory.find_named_in("G1", "what about carol?") == []

    async def test_resolve_by_nickname(self, directory: UserDirectory) -> None:
        """Nicknames resolve to the user ID."""
        assert await directory.resolve_user_id("G1", "what did bobby say") == "U2"

    async def test_resolve_first_match(self, directory: UserDirectory) -> None:
        """The first user in directory order wins."""
        assert await directory.resolve_user_id("G1", "alice or bob?") == "U1"

    async def test_resolve_none(self, directory: UserDirectory) -> None:
        """No match returns None."""
        assert await directory.resolve_user_id("G1", "anyone?") is None


class TestCaching:
    """Cache lifecycle tests."""

    async def test_loaded_once_per_guild(
        self, directory: UserDirectory, user_repository: AsyncMock
    ) -> None:
        """Repeated lookups in one guild hit the store once."""
        await directory.find_named_in("G1", "alice")
        await directory.resolve_user_id("G1", "bob")

        user_repository.find_all_with_nicknames.assert_awaited_once_with("G1")

    async def test_rebuilt_on_guild_change(
        self, directory: UserDirectory, user_repository: AsyncMock
    ) -> None:
        """A different guild reloads the cache."""
        await directory.identities("G1")
        user_repository.find_all_with_nicknames.return_value = []

        assert await directory.identities("G2") == []
        assert user_repository.find_all_with_nicknames.await_count == 2

    async def test_invalidate(
        self, directory: UserDirectory, user_repository: AsyncMock
    ) -> None:
        """Invalidation forces a reload."""
        await directory.identities("G1")
        directory.invalidate()
        await directory.identities("G1")

        assert user_repository.find_all_with_nicknames.await_count == 2
