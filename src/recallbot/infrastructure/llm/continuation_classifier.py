"""LLM-based follow-up continuation classifier."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from recallbot.domain.entities import ConversationTurn
from recallbot.infrastructure.llm.client import LLMClient
from recallbot.infrastructure.llm.exceptions import LLMError
from recallbot.infrastructure.llm.templates import create_jinja_env

logger = logging.getLogger(__name__)

CLASSIFIER_MAX_TOKENS = 5


class LLMContinuationClassifier:
    """Asks a small model whether a message continues a conversation.

    Fails closed: LLM errors (including exhausted retries) and any reply
    that does not start with "yes" are treated as "not a follow-up".
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        max_retries: int = 1,
        base_delay_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the classifier.

        Args:
            client: LLM client for the (cheap) classifier model.
            max_retries: Rate-limit retries for one classification.
            base_delay_seconds: Wait before the first retry.
            sleep: Sleep function (injectable for tests).
        """
        self._client = client
        self._max_retries = max_retries
        self._base_delay_seconds = base_delay_seconds
        self._sleep = sleep
        self._template = create_jinja_env().get_template("continuation_check.j2")

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
            True only when the model answers yes.
        """
        prompt = self._template.render(history=history, new_message=new_message)

        try:
            response = await self._client.complete_with_retry(
                [{"role": "user", "content": prompt}],
                "followup-check",
                max_retries=self._max_retries,
                base_delay_seconds=self._base_delay_seconds,
                sleep=self._sleep,
                call_type="followup_check",
                max_tokens=CLASSIFIER_MAX_TOKENS,
            )
        except LLMError as e:
            logger.error("Follow-up classification failed: %s", e)
            return False

        answer = response.text.strip().lower()
        logger.debug("Follow-up classification answer: %r", answer)
        return answer.startswith("yes")
