"""Domain repositories."""

from recallbot.domain.repositories.channel_repository import ChannelRepository
from recallbot.domain.repositories.link_repository import LinkRepository
from recallbot.domain.repositories.message_repository import MessageRepository
from recallbot.domain.repositories.profile_repository import ProfileRepository
from recallbot.domain.repositories.query_log_repository import (
    QueryLogRepository,
    UsageRepository,
)
from recallbot.domain.repositories.settings_repository import SettingsRepository
from recallbot.domain.repositories.user_repository import UserRepository

__all__ = [
    "ChannelRepository",
    "LinkRepository",
    "MessageRepository",
    "ProfileRepository",
    "QueryLogRepository",
    "SettingsRepository",
    "UsageRepository",
    "UserRepository",
]
