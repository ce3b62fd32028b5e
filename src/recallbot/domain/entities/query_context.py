"""Query context entities.

A QueryContext is built fresh for every question and handed to the prompt
templates. It is never shared between requests.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ArchiveStats:
    """Aggregate size of a guild's archive.

    Attributes:
        total_messages: Number of archived messages.
        earliest: Timestamp of the oldest archived message.
        latest: Timestamp of the newest archived message.
        unique_authors: Number of distinct authors.
    """

    total_messages: int
    earliest: datetime | None
    latest: datetime | None
    unique_authors: int


@dataclass(frozen=True)
class RecentMessage:
    """A message from the active channel's recent transcript."""

    author: str
    content: str
    timestamp: datetime


@dataclass(frozen=True)
class RelevantMessage:
    """A historical message selected as evidence for the question."""

    author: str
    content: str
    timestamp: datetime
    channel: str

    @property
    def dedup_key(self) -> tuple[str, str]:
        """Identity used to drop repeated evidence: author and content prefix."""
        return (self.author, self.content[:50])

    @property
    def weight(self) -> int:
        """Character weight counted against the context budget."""
        return len(self.content) + len(self.author) + 50


@dataclass(frozen=True)
class ProfileSummary:
    """Profile of a user the question plausibly refers to."""

    username: str
    summary: str
    traits: list[str] = field(default_factory=list)
    games: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    communication_style: str | None = None
    quotes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReferencedLink:
    """Summary of a previously analyzed link."""

    url: str
    summary: str
    author: str
    timestamp: datetime


@dataclass(frozen=True)
class MonthlyCount:
    """Number of matches in one calendar month (``YYYY-MM``)."""

    month: str
    count: int


@dataclass(frozen=True)
class RecallData:
    """Aggregate that replaces raw search evidence in recall mode.

    Attributes:
        total_count: Number of search results (not the number of samples).
        monthly_breakdown: Match counts per month, ascending by month key.
        samples: Evenly spaced results across the whole result list.
        target_user: Name of the author the search was restricted to.
    """

    total_count: int
    monthly_breakdown: list[MonthlyCount]
    samples: list[RelevantMessage]
    target_user: str | None = None


@dataclass
class QueryContext:
    """Evidence gathered for a single question.

    Attributes:
        recent_conversation: Active channel transcript, oldest first.
        relevant_messages: Deduplicated, budget-trimmed historical evidence.
        user_profiles: Profiles of users the question refers to.
        referenced_links: Summaries of matching shared links.
        archive_stats: Archive size, only when the archive is non-empty.
        recall_data: Recall-mode aggregate, only in recall mode with results.
    """

    recent_conversation: list[RecentMessage] = field(default_factory=list)
    relevant_messages: list[RelevantMessage] = field(default_factory=list)
    user_profiles: list[ProfileSummary] = field(default_factory=list)
    referenced_links: list[ReferencedLink] = field(default_factory=list)
    archive_stats: ArchiveStats | None = None
    recall_data: RecallData | None = None
