"""Domain entities."""

from recallbot.domain.entities.channel import Channel
from recallbot.domain.entities.conversation_window import (
    ConversationTurn,
    ConversationWindow,
    TurnRole,
    window_key,
)
from recallbot.domain.entities.generated_answer import GeneratedAnswer
from recallbot.domain.entities.link_analysis import LinkAnalysis
from recallbot.domain.entities.message import Message
from recallbot.domain.entities.profile import ProfileCandidate, UserProfile
from recallbot.domain.entities.query_context import (
    ArchiveStats,
    MonthlyCount,
    ProfileSummary,
    QueryContext,
    RecallData,
    RecentMessage,
    ReferencedLink,
    RelevantMessage,
)
from recallbot.domain.entities.query_log import QueryLogEntry
from recallbot.domain.entities.query_mode import QueryMode
from recallbot.domain.entities.user import User, UserIdentity

__all__ = [
    "ArchiveStats",
    "Channel",
    "ConversationTurn",
    "ConversationWindow",
    "GeneratedAnswer",
    "LinkAnalysis",
    "Message",
    "MonthlyCount",
    "ProfileCandidate",
    "ProfileSummary",
    "QueryContext",
    "QueryLogEntry",
    "QueryMode",
    "RecallData",
    "RecentMessage",
    "ReferencedLink",
    "RelevantMessage",
    "TurnRole",
    "User",
    "UserIdentity",
    "UserProfile",
    "window_key",
]
