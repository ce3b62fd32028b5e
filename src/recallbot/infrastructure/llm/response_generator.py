"""LLM answer generator."""

import logging

from recallbot.config import PersonaConfig, QueryConfig, RetryConfig
from recallbot.domain.entities import (
    ConversationTurn,
    GeneratedAnswer,
    Message,
    QueryContext,
    QueryMode,
)
from recallbot.infrastructure.llm.client import LLMClient, LLMResponse
from recallbot.infrastructure.llm.system_prompts import SystemPrompts
from recallbot.infrastructure.llm.templates import create_jinja_env

logger = logging.getLogger(__name__)

SUMMARY_MAX_TOKENS = 500


class LiteLLMAnswerGenerator:
    """LiteLLM-based AnswerGenerator implementation.

    Renders the question and its gathered evidence through Jinja2
    templates and sends them to the LLM with rate-limit retry.
    System prompts are resolved per call so operator edits apply at once.
    """

    def __init__(
        self,
        client: LLMClient,
        persona: PersonaConfig,
        query_config: QueryConfig,
        retry_config: RetryConfig,
        system_prompts: SystemPrompts,
        *,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the generator.

        Args:
            client: LLMClient instance.
            persona: Persona whose system prompt frames every answer.
            query_config: Per-mode answer length ceilings.
            retry_config: Rate-limit retry policy for interactive calls.
            system_prompts: Operator overrides and custom instructions.
            debug_llm_messages: If True, log LLM messages at INFO level.
        """
        self._client = client
        self._persona = persona
        self._query_config = query_config
        self._retry_config = retry_config
        self._system_prompts = system_prompts
        self._debug_llm_messages = debug_llm_messages
        self._jinja_env = create_jinja_env()

    async def generate(
        self,
        question: str,
        context: QueryContext,
        mode: QueryMode,
        history: list[ConversationTurn] | None = None,
    ) -> GeneratedAnswer:
        """Generate an answer.

        Follow-up answers (``history`` given) get the prior turns prepended
        to the prompt and are tracked under their own usage category.

        Args:
            question: Question text.
            context: Evidence gathered for the question.
            mode: Answer mode; decides the length ceiling.
            history: Prior turns when answering a follow-up.

        Returns:
            Generated answer.

        Raises:
            LLMError: If the completion fails after retries.
        """
        user_prompt = self.build_user_prompt(question, context, history)
        system_prompt = await self._system_prompts.query_prompt(
            self._persona.system_prompt
        )
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        max_tokens = (
            self._query_config.recall_max_tokens
            if mode is QueryMode.RECALL
            else self._query_config.default_max_tokens
        )
        is_follow_up = history is not None

        return await self._complete(
            messages,
            label="followup" if is_follow_up else "query",
            call_type="followup_response" if is_follow_up else "query",
            max_tokens=max_tokens,
        )

    async def summarize(
        self,
        messages: list[Message],
        timeframe: str,
    ) -> GeneratedAnswer:
        """Summarize a transcript.

        Args:
            messages: Messages to summarize, oldest first.
            timeframe: Human-readable timeframe label.

        Returns:
            Generated summary.
        """
        system_prompt = await self._system_prompts.summarize_prompt(
            self._jinja_env.get_template("summarize_system.j2").render(
                persona_name=self._persona.name
            )
        )
        user_prompt = self._jinja_env.get_template("summarize_prompt.j2").render(
            messages=messages, timeframe=timeframe
        )
        return await self._complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            label="summarize",
            call_type="summarize",
            max_tokens=SUMMARY_MAX_TOKENS,
        )

    def build_user_prompt(
        self,
        question: str,
        context: QueryContext,
        history: list[ConversationTurn] | None = None,
    ) -> str:
        """Render the user prompt for a question.

        Args:
            question: Question text.
            context: Evidence gathered for the question.
            history: Prior turns when answering a follow-up.

        Returns:
            Rendered prompt.
        """
        if history is not None:
            template = self._jinja_env.get_template("follow_up_prompt.j2")
            return template.render(
                question=question,
                context=context,
                history=history,
                persona_name=self._persona.name,
            )
        template = self._jinja_env.get_template("query_user_prompt.j2")
        return template.render(question=question, context=context)

    async def _complete(
        self,
        messages: list[dict[str, str]],
        *,
        label: str,
        call_type: str,
        max_tokens: int,
    ) -> GeneratedAnswer:
        if self._should_log():
            self._log_messages(messages)

        response: LLMResponse = await self._client.complete_with_retry(
            messages,
            label,
            max_retries=self._retry_config.max_retries,
            base_delay_seconds=self._retry_config.base_delay_seconds,
            call_type=call_type,
            max_tokens=max_tokens,
        )

        if self._should_log():
            self._log_response(response.text)

        return GeneratedAnswer(
            text=response.text,
            model=response.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )

    def _should_log(self) -> bool:
        """Check if logging should occur."""
        return self._debug_llm_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_messages(self, messages: list[dict[str, str]]) -> None:
        """Log LLM request messages."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Request Messages ===")
        for i, msg in enumerate(messages):
            log_func("[%d] role=%s", i, msg.get("role", "unknown"))
            log_func("    content: %s", msg.get("content", ""))
        log_func("=== End of Messages ===")

    def _log_response(self, response: str) -> None:
        """Log LLM response."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Response ===")
        log_func("response: %s", response)
        log_func("=== End of Response ===")
