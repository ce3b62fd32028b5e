"""Common fixtures for persistence tests."""

from collections.abc import AsyncGenerator

import pytest

from recallbot.infrastructure.persistence import DatabaseManager


@pytest.fixture
async def db_manager() -> AsyncGenerator[DatabaseManager, None]:
    """In-memory archive with tables and full-text index created."""
    manager = DatabaseManager(":memory:")
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def session_factory(db_manager: DatabaseManager):
    """Session factory bound to the in-memory archive."""
    return db_manager.get_session

