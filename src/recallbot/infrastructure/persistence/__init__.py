"""Persistence infrastructure."""

from recallbot.infrastructure.persistence.channel_repository import (
    SQLiteChannelRepository,
)
from recallbot.infrastructure.persistence.database import DatabaseManager
from recallbot.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from recallbot.infrastructure.persistence.fts_query import build_fts_query
from recallbot.infrastructure.persistence.link_repository import SQLiteLinkRepository
from recallbot.infrastructure.persistence.message_repository import (
    SQLiteMessageRepository,
)
from recallbot.infrastructure.persistence.profile_repository import (
    SQLiteProfileRepository,
)
from recallbot.infrastructure.persistence.query_log_repository import (
    SQLiteQueryLogRepository,
    SQLiteUsageRepository,
)
from recallbot.infrastructure.persistence.settings_repository import (
    SQLiteSettingsRepository,
)
from recallbot.infrastructure.persistence.user_repository import SQLiteUserRepository

__all__ = [
    "DatabaseError",
    "DatabaseManager",
    "PersistenceError",
    "SQLiteChannelRepository",
    "SQLiteLinkRepository",
    "SQLiteMessageRepository",
    "SQLiteProfileRepository",
    "SQLiteQueryLogRepository",
    "SQLiteSettingsRepository",
    "SQLiteUsageRepository",
    "SQLiteUserRepository",
    "build_fts_query",
]
