"""Question answering use case."""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from recallbot.application.services import ContextBuilder, FollowUpTracker
from recallbot.application.use_cases.helpers import split_message, strip_mentions
from recallbot.application.use_cases.summarize_request import (
    SummarizeRequest,
    parse_summarize_request,
)
from recallbot.config import QueryConfig
from recallbot.domain.entities import (
    ConversationTurn,
    GeneratedAnswer,
    Message,
    QueryLogEntry,
)
from recallbot.domain.repositories import MessageRepository, QueryLogRepository
from recallbot.domain.services import AnswerGenerator, MessagingService, classify_mode

logger = logging.getLogger(__name__)

EMPTY_QUESTION_REPLY = "I'm here. What do you need?"
NO_ANSWER_REPLY = "I could not generate a response."
NO_SUMMARY_REPLY = "Could not generate summary."
SUMMARY_MESSAGE_LIMIT = 500


class QueryHandler:
    """Use case for answering questions about the archive.

    Wires mode classification, context assembly, answer generation and
    the follow-up tracker together. Errors from answer generation
    propagate to the caller, which is responsible for the user-facing
    apology. Query logging is best-effort.
    """

    def __init__(
        self,
        messaging_service: MessagingService,
        context_builder: ContextBuilder,
        answer_generator: AnswerGenerator,
        follow_up_tracker: FollowUpTracker,
        message_repository: MessageRepository,
        query_log_repository: QueryLogRepository,
        config: QueryConfig,
        bot_user_id: str,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """Initialize the use case.

        Args:
            messaging_service: Service for sending replies.
            context_builder: Gathers evidence for a question.
            answer_generator: Produces answers and summaries.
            follow_up_tracker: Conversation windows to open and update.
            message_repository: Archive used for summaries.
            query_log_repository: Records answered questions.
            config: Query settings (reply chunk size, etc.).
            bot_user_id: The bot's user ID (excluded from mentions).
            now: Current wall-clock time (injectable for tests).
        """
        self._messaging_service = messaging_service
        self._context_builder = context_builder
        self._answer_generator = answer_generator
        self._follow_up_tracker = follow_up_tracker
        self._message_repository = message_repository
        self._query_log_repository = query_log_repository
        self._config = config
        self._bot_user_id = bot_user_id
        self._now = now

    async def handle_question(self, message: Message) -> None:
        """Answer a message that mentions the bot.

        Processing flow:
        1. Strip the bot mention; reply briefly to an empty question
        2. Summarize requests are answered from a time-window transcript
        3. Otherwise classify mode, build context and generate the answer
        4. Reply, open a follow-up window and log the query

        Args:
            message: The received message.

        Raises:
            LLMError: If the answer could not be generated.
        """
        started = time.monotonic()
        question = strip_mentions(message.text)
        if not question:
            await self._reply(message.channel.id, EMPTY_QUESTION_REPLY)
            return

        request = parse_summarize_request(question, self._now())
        if request is not None:
            summary = await self.summarize(
                message.guild_id, message.channel.id, request
            )
            await self._reply(message.channel.id, summary)
            await self._log_query(message, question, summary, started, None)
            return

        mentioned = [uid for uid in message.mentions if uid != self._bot_user_id]
        answer = await self._answer(
            message.guild_id, question, mentioned, message.channel.id
        )

        await self._reply(message.channel.id, answer.text)
        await self._follow_up_tracker.register_window(
            message.channel.id, message.user.id, question, answer.text
        )
        await self._log_query(message, question, answer.text, started, answer)

    async def handle_follow_up(
        self,
        message: Message,
        history: Sequence[ConversationTurn],
    ) -> None:
        """Answer a message accepted as a follow-up.

        Args:
            message: The follow-up message (it does not mention the bot).
            history: Turns of the conversation so far, oldest first.

        Raises:
            LLMError: If the answer could not be generated.
        """
        started = time.monotonic()
        question = message.text.strip()
        mode = classify_mode(question)
        context = await self._context_builder.build_context(
            message.guild_id, question, (), message.channel.id, mode
        )
        answer = await self._answer_generator.generate(
            question, context, mode, history=list(history)
        )
        text = answer.text or NO_ANSWER_REPLY

        await self._reply(message.channel.id, text)
        await self._follow_up_tracker.record_follow_up_response(
            message.channel.id, message.user.id, text
        )
        await self._log_query(
            message, f"[follow-up] {question}", text, started, answer
        )

    async def answer_question(
        self,
        guild_id: str,
        question: str,
        mentioned_user_ids: Sequence[str] = (),
        channel_id: str | None = None,
    ) -> str:
        """Answer a question without sending anything.

        Args:
            guild_id: Guild whose archive is searched.
            question: Question text.
            mentioned_user_ids: Users the question explicitly refers to.
            channel_id: Channel for the recent-conversation context, if any.

        Returns:
            Answer text.
        """
        answer = await self._answer(guild_id, question, mentioned_user_ids, channel_id)
        return answer.text

    async def summarize(
        self,
        guild_id: str,
        channel_id: str,
        request: SummarizeRequest,
    ) -> str:
        """Summarize the conversation in a timeframe.

        Args:
            guild_id: Guild to summarize when the request is guild-wide.
            channel_id: Channel to summarize otherwise.
            request: Parsed timeframe and scope.

        Returns:
            Reply text (summary, or a notice when nothing was archived).
        """
        if request.guild_wide:
            messages = await self._message_repository.find_by_guild_since(
                guild_id, request.since, SUMMARY_MESSAGE_LIMIT
            )
        else:
            messages = await self._message_repository.find_by_channel_since(
                channel_id, request.since, SUMMARY_MESSAGE_LIMIT
            )

        if not messages:
            return (
                f"No messages found for {request.label}. Either nothing was said "
                "or I haven't archived those messages yet."
            )

        logger.info(
            "Summarizing %d messages for %s (guild_wide=%s)",
            len(messages),
            request.label,
            request.guild_wide,
        )
        summary = await self._answer_generator.summarize(messages, request.label)
        text = summary.text or NO_SUMMARY_REPLY
        return f"*TL;DR for {request.label}* ({len(messages)} messages):\n{text}"

    async def _answer(
        self,
        guild_id: str,
        question: str,
        mentioned_user_ids: Sequence[str],
        channel_id: str | None,
    ) -> GeneratedAnswer:
        mode = classify_mode(question)
        context = await self._context_builder.build_context(
            guild_id, question, mentioned_user_ids, channel_id, mode
        )
        answer = await self._answer_generator.generate(question, context, mode)
        if not answer.text:
            return GeneratedAnswer(
                text=NO_ANSWER_REPLY,
                model=answer.model,
                input_tokens=answer.input_tokens,
                output_tokens=answer.output_tokens,
            )
        return answer

    async def _reply(self, channel_id: str, text: str) -> None:
        for chunk in split_message(text, self._config.reply_chunk_size):
            await self._messaging_service.send_message(channel_id, chunk)

    async def _log_query(
        self,
        message: Message,
        question: str,
        answer: str,
        started: float,
        generated: GeneratedAnswer | None,
    ) -> None:
        entry = QueryLogEntry(
            guild_id=message.guild_id,
            channel_id=message.channel.id,
            asking_user_id=message.user.id,
            question=question,
            answer=answer,
            model=generated.model if generated else None,
            input_tokens=generated.input_tokens if generated else None,
            output_tokens=generated.output_tokens if generated else None,
            response_time_ms=int((time.monotonic() - started) * 1000),
        )
        try:
            await self._query_log_repository.record(entry)
        except Exception as e:
            logger.error("Failed to log query: %s", e)
