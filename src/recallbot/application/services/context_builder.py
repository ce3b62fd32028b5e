"""Context assembly for answering questions about the archive."""

import logging
import re
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import timezone
from typing import TypeVar

from recallbot.application.services.user_directory import UserDirectory
from recallbot.config import QueryConfig
from recallbot.domain.entities import (
    Message,
    MonthlyCount,
    ProfileSummary,
    QueryContext,
    QueryMode,
    RecallData,
    RecentMessage,
    ReferencedLink,
    RelevantMessage,
    User,
    UserProfile,
)
from recallbot.domain.repositories import (
    ChannelRepository,
    LinkRepository,
    MessageRepository,
    ProfileRepository,
    UserRepository,
)
from recallbot.domain.services import strip_recall_phrasing

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PUNCTUATION = re.compile(r"[^\w\s]")


def sanitize_query(question: str) -> str:
    """Strip punctuation from a question for lexical search."""
    return _PUNCTUATION.sub("", question).strip()


def remove_names(text: str, names: Iterable[str | None]) -> str:
    """Remove whole-word occurrences of the given names, ignoring case."""
    for name in names:
        if name:
            text = re.sub(rf"\b{re.escape(name)}\b", " ", text, flags=re.IGNORECASE)
    return " ".join(text.split())


def deduplicate(messages: Sequence[RelevantMessage]) -> list[RelevantMessage]:
    """Drop messages whose (author, content prefix) was already seen.

    First-seen order is preserved.
    """
    seen: set[tuple[str, str]] = set()
    unique = []
    for message in messages:
        if message.dedup_key in seen:
            continue
        seen.add(message.dedup_key)
        unique.append(message)
    return unique


def trim_to_budget(
    messages: Sequence[RelevantMessage], budget: int
) -> list[RelevantMessage]:
    """Keep the leading messages whose accumulated weight fits the budget.

    Everything from the first message that would push the total over the
    budget onwards is dropped.
    """
    kept = []
    total = 0
    for message in messages:
        if total + message.weight > budget:
            break
        total += message.weight
        kept.append(message)
    return kept


def evenly_spaced_sample(items: Sequence[T], size: int) -> list[T]:
    """Pick ``size`` items spread across the whole sequence.

    Index ``i * len(items) // size`` is taken for ``i`` in ``0..size-1``,
    so the sample spans the list in its given order. Shorter sequences
    are returned whole.
    """
    if size <= 0:
        return []
    if len(items) <= size:
        return list(items)
    return [items[i * len(items) // size] for i in range(size)]


def monthly_breakdown(messages: Sequence[Message]) -> list[MonthlyCount]:
    """Count messages per UTC calendar month, ascending by ``YYYY-MM``."""
    counts = Counter(
        message.timestamp.astimezone(timezone.utc).strftime("%Y-%m")
        for message in messages
    )
    return [MonthlyCount(month, count) for month, count in sorted(counts.items())]


async def skip_and_log(phase: str, operation: Callable[[], Awaitable[None]]) -> None:
    """Run one retrieval phase; on failure log a warning and carry on.

    A failing phase leaves the context emptier instead of failing the
    whole request.
    """
    try:
        await operation()
    except Exception as e:
        logger.warning("Context phase '%s' failed, skipping: %s", phase, e)


def _summarize_profile(username: str, profile: UserProfile) -> ProfileSummary:
    return ProfileSummary(
        username=username,
        summary=profile.summary or "No summary available",
        traits=list(profile.personality_traits),
        games=list(profile.favorite_games),
        topics=list(profile.favorite_topics),
        communication_style=profile.communication_style,
        quotes=list(profile.notable_quotes),
    )


class _NameCache:
    """Request-scoped author and channel name lookups."""

    def __init__(
        self,
        user_repository: UserRepository,
        channel_repository: ChannelRepository,
    ) -> None:
        self._user_repository = user_repository
        self._channel_repository = channel_repository
        self._users: dict[str, User | None] = {}
        self._channels: dict[str, str] = {}

    async def user(self, user_id: str) -> User | None:
        if user_id not in self._users:
            self._users[user_id] = await self._user_repository.find_by_id(user_id)
        return self._users[user_id]

    async def author(self, user_id: str) -> str:
        user = await self.user(user_id)
        return user.label if user is not None else user_id

    async def channel(self, channel_id: str) -> str:
        if channel_id not in self._channels:
            channel = await self._channel_repository.find_by_id(channel_id)
            self._channels[channel_id] = (
                channel.name if channel is not None and channel.name else channel_id
            )
        return self._channels[channel_id]

    async def relevant(self, message: Message) -> RelevantMessage:
        return RelevantMessage(
            author=await self.author(message.user.id),
            content=message.text,
            timestamp=message.timestamp,
            channel=await self.channel(message.channel.id),
        )


class ContextBuilder:
    """Gathers the evidence handed to the model for one question.

    Each retrieval phase (archive stats, recent transcript, mentioned
    users, search, name matching, links) runs independently under
    ``skip_and_log``. In recall mode the search results are replaced by
    a count, a monthly histogram and an evenly spaced sample.
    """

    def __init__(
        self,
        message_repository: MessageRepository,
        user_repository: UserRepository,
        channel_repository: ChannelRepository,
        profile_repository: ProfileRepository,
        link_repository: LinkRepository,
        user_directory: UserDirectory,
        config: QueryConfig,
    ) -> None:
        self._message_repository = message_repository
        self._user_repository = user_repository
        self._channel_repository = channel_repository
        self._profile_repository = profile_repository
        self._link_repository = link_repository
        self._user_directory = user_directory
        self._config = config

    async def build_context(
        self,
        guild_id: str,
        question: str,
        mentioned_user_ids: Sequence[str] = (),
        channel_id: str | None = None,
        mode: QueryMode = QueryMode.DEFAULT,
    ) -> QueryContext:
        """Build the context for a question.

        Args:
            guild_id: Guild whose archive is searched.
            question: Question text (bot mention removed).
            mentioned_user_ids: Users explicitly mentioned in the question.
            channel_id: Channel the question was asked in, if any.
            mode: Answer mode; decides search cap, budget and recall branch.

        Returns:
            A fresh QueryContext. Never raises for a failing phase.
        """
        context = QueryContext()
        names = _NameCache(self._user_repository, self._channel_repository)
        mentioned = list(mentioned_user_ids)

        async def archive_stats() -> None:
            stats = await self._message_repository.get_guild_stats(guild_id)
            if stats.total_messages > 0:
                context.archive_stats = stats

        async def recent_conversation() -> None:
            if channel_id is None:
                return
            recent = await self._message_repository.find_recent_by_channel(
                channel_id, self._config.recent_message_limit
            )
            context.recent_conversation = [
                RecentMessage(
                    author=message.user.label or "Unknown",
                    content=message.text,
                    timestamp=message.timestamp,
                )
                for message in reversed(recent)
            ]

        async def mentioned_user(user_id: str) -> None:
            user = await names.user(user_id)
            profile = await self._profile_repository.find_by_user_and_guild(
                user_id, guild_id
            )
            if profile is not None and user is not None:
                context.user_profiles.append(_summarize_profile(user.label, profile))

            history = await self._message_repository.find_recent_by_user(
                user_id, guild_id, self._config.user_message_limit
            )
            for message in history:
                context.relevant_messages.append(
                    RelevantMessage(
                        author=user.label if user is not None else user_id,
                        content=message.text,
                        timestamp=message.timestamp,
                        channel=await names.channel(message.channel.id),
                    )
                )

        async def search() -> None:
            await self._search(context, names, guild_id, question, mentioned, mode)

        async def named_users() -> None:
            if mentioned:
                return
            for identity in await self._user_directory.find_named_in(
                guild_id, question
            ):
                profile = await self._profile_repository.find_by_user_and_guild(
                    identity.id, guild_id
                )
                if profile is not None:
                    context.user_profiles.append(
                        _summarize_profile(identity.label, profile)
                    )

        async def referenced_links() -> None:
            links = await self._link_repository.search_by_guild(
                guild_id, question, self._config.link_limit
            )
            for link in links:
                if not link.summary:
                    continue
                context.referenced_links.append(
                    ReferencedLink(
                        url=link.url,
                        summary=link.summary,
                        author=await names.author(link.author_id),
                        timestamp=link.created_at,
                    )
                )

        await skip_and_log("archive stats", archive_stats)
        await skip_and_log("recent conversation", recent_conversation)
        for user_id in mentioned:
            await skip_and_log(
                f"mentioned user {user_id}",
                lambda user_id=user_id: mentioned_user(user_id),
            )
        await skip_and_log("search", search)
        await skip_and_log("name matching", named_users)

        budget = (
            self._config.recall_char_budget
            if mode is QueryMode.RECALL
            else self._config.default_char_budget
        )
        context.relevant_messages = trim_to_budget(
            deduplicate(context.relevant_messages), budget
        )

        await skip_and_log("referenced links", referenced_links)

        logger.info(
            "Query context (%s): %d recent, %d relevant, %d profiles, %d links",
            mode.value,
            len(context.recent_conversation),
            len(context.relevant_messages),
            len(context.user_profiles),
            len(context.referenced_links),
        )
        return context

    async def _search(
        self,
        context: QueryContext,
        names: _NameCache,
        guild_id: str,
        question: str,
        mentioned: list[str],
        mode: QueryMode,
    ) -> None:
        recall = mode is QueryMode.RECALL
        sanitized = sanitize_query(
            strip_recall_phrasing(question) if recall else question
        )
        if not sanitized:
            return

        limit = (
            self._config.recall_search_limit
            if recall
            else self._config.default_search_limit
        )

        target_author_id: str | None = None
        if recall:
            target_author_id = await self._resolve_target_author(
                guild_id, question, mentioned
            )

        if target_author_id is not None:
            sanitized = remove_names(
                sanitized, await self._target_names(guild_id, names, target_author_id)
            )
            if not sanitized:
                return

        results = await self._message_repository.search(
            guild_id, sanitized, limit, author_id=target_author_id
        )

        if recall and results:
            samples = [
                await names.relevant(message)
                for message in evenly_spaced_sample(
                    results, self._config.recall_sample_size
                )
            ]
            target_user = (
                await names.author(target_author_id)
                if target_author_id is not None
                else None
            )
            context.recall_data = RecallData(
                total_count=len(results),
                monthly_breakdown=monthly_breakdown(results),
                samples=samples,
                target_user=target_user,
            )
            logger.info(
                "Recall mode: %d results, %d samples (target user: %s)",
                len(results),
                len(samples),
                target_user,
            )
            return

        for message in results:
            context.relevant_messages.append(await names.relevant(message))

    async def _target_names(
        self, guild_id: str, names: _NameCache, user_id: str
    ) -> list[str | None]:
        try:
            for identity in await self._user_directory.identities(guild_id):
                if identity.id == user_id:
                    return [
                        identity.username,
                        identity.display_name,
                        *identity.nicknames,
                    ]
        except Exception as e:
            logger.warning("Context phase 'name resolution' failed, skipping: %s", e)
        user = await names.user(user_id)
        return [user.name, user.display_name] if user is not None else []

    async def _resolve_target_author(
        self, guild_id: str, question: str, mentioned: list[str]
    ) -> str | None:
        if mentioned:
            return mentioned[0]
        try:
            return await self._user_directory.resolve_user_id(guild_id, question)
        except Exception as e:
            logger.warning("Context phase 'name resolution' failed, skipping: %s", e)
            return None
