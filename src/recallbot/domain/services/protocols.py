"""Domain service protocols."""

from typing import Protocol

from recallbot.domain.entities import (
    ConversationTurn,
    GeneratedAnswer,
    Message,
    QueryContext,
    QueryMode,
    UserProfile,
)


class MessagingService(Protocol):
    """Messaging abstraction (platform-independent).

    This protocol defines the interface for sending replies
    to any messaging platform (Slack, Discord, etc.).
    """

    async def send_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> None:
        """Send a message to a channel.

        Args:
            channel_id: Target channel ID.
            text: Message content.
            thread_ts: Thread timestamp for thread replies.

        Raises:
            ChannelNotAccessibleError: If the bot can no longer post there.
        """
        ...


class ContinuationClassifier(Protocol):
    """Decides whether an unaddressed message continues a conversation.

    Implementations must fail closed: any error or unclear answer means
    the message is not a follow-up.
    """

    async def is_follow_up(
        self,
        history: list[ConversationTurn],
        new_message: str,
    ) -> bool:
        """Check whether the new message continues the conversation.

        Args:
            history: Recent turns of the conversation, oldest first.
            new_message: Message to classify.

        Returns:
            True only for an affirmative answer.
        """
        ...


class AnswerGenerator(Protocol):
    """Answer generation abstraction.

    This protocol defines the interface for turning a question and its
    gathered evidence into an answer using an LLM.
    """

    async def generate(
        self,
        question: str,
        context: QueryContext,
        mode: QueryMode,
        history: list[ConversationTurn] | None = None,
    ) -> GeneratedAnswer:
        """Generate an answer.

        Args:
            question: Question text (bot mention removed).
            context: Evidence gathered for the question.
            mode: Answer mode; decides the length ceiling.
            history: Prior turns when answering a follow-up.

        Returns:
            Generated answer.

        Raises:
            LLMError: If the completion fails after retries.
        """
        ...

    async def summarize(
        self,
        messages: list[Message],
        timeframe: str,
    ) -> GeneratedAnswer:
        """Summarize a transcript.

        Args:
            messages: Messages to summarize, oldest first.
            timeframe: Human-readable timeframe label ("today", ...).

        Returns:
            Generated summary.
        """
        ...


class ProfileAnalyzer(Protocol):
    """Turns a user's recent messages into a profile."""

    async def analyze(
        self,
        user_id: str,
        guild_id: str,
        user_name: str,
        messages: list[Message],
    ) -> UserProfile:
        """Analyze a user's messages.

        Args:
            user_id: User being profiled.
            guild_id: Guild the messages belong to.
            user_name: Name shown to the model.
            messages: The user's recent messages, newest first.

        Returns:
            Freshly analyzed profile.

        Raises:
            LLMError: If the completion fails after retries.
        """
        ...
