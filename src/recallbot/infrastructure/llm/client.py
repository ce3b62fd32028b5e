"""LLM client wrapper."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import litellm
from litellm.exceptions import AuthenticationError, RateLimitError

from recallbot.config import LLMConfig
from recallbot.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMRateLimitError,
)
from recallbot.infrastructure.llm.retry import call_with_retry
from recallbot.infrastructure.llm.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMResponse:
    """Result of one chat completion.

    Attributes:
        text: Text of the first choice (empty when the model returned none).
        model: Model that served the request.
        input_tokens: Prompt tokens, if reported.
        output_tokens: Completion tokens, if reported.
    """

    text: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class LLMClient:
    """LiteLLM wrapper client.

    This class provides a simplified async interface to LiteLLM,
    applying configuration, mapping errors and recording token usage.
    """

    def __init__(
        self,
        config: LLMConfig,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: LLM configuration (model, temperature, max_tokens, etc.).
            usage_tracker: Records token usage per call type, if given.
        """
        self._config = config
        self._usage_tracker = usage_tracker

    @property
    def model(self) -> str:
        """Configured model name."""
        return self._config.model

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        call_type: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Execute chat completion.

        Args:
            messages: OpenAI-format message list.
                [{"role": "system", "content": "..."}, ...]
            call_type: Usage category to record (query, followup_check, ...).
            **kwargs: Additional parameters (override config).

        Returns:
            Completion result.

        Raises:
            LLMAuthenticationError: Invalid API key.
            LLMRateLimitError: Rate limit exceeded.
            LLMError: Other API errors.
        """
        params = {
            "model": self._config.model,
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "messages": messages,
            **kwargs,
        }

        logger.debug(
            "LLM request: model=%s, max_tokens=%s",
            params["model"],
            params["max_tokens"],
        )

        try:
            response = await litellm.acompletion(**params)
        except AuthenticationError as e:
            logger.error("LLM authentication error: %s", e)
            raise LLMAuthenticationError(str(e)) from e
        except RateLimitError as e:
            logger.warning("LLM rate limit exceeded: %s", e)
            raise LLMRateLimitError(str(e)) from e
        except Exception as e:
            logger.error("LLM error: %s", e)
            raise LLMError(str(e)) from e

        result = self._to_response(response, params["model"])
        logger.debug(
            "LLM response received: input_tokens=%s, output_tokens=%s",
            result.input_tokens,
            result.output_tokens,
        )

        if call_type is not None and self._usage_tracker is not None:
            await self._usage_tracker.track(call_type, result)

        return result

    async def complete_with_retry(
        self,
        messages: list[dict[str, str]],
        label: str,
        *,
        max_retries: int = 3,
        base_delay_seconds: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        call_type: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Execute chat completion, retrying on rate limits.

        Args:
            messages: OpenAI-format message list.
            label: Call site name used in retry log messages.
            max_retries: Number of retries after the first attempt.
            base_delay_seconds: Wait before the first retry.
            sleep: Sleep function (injectable for tests).
            call_type: Usage category to record.
            **kwargs: Additional parameters (override config).

        Returns:
            Completion result.

        Raises:
            LLMError: Non-rate-limit failure, or rate limited on every attempt.
        """
        return await call_with_retry(
            lambda: self.complete(messages, call_type=call_type, **kwargs),
            label,
            max_retries=max_retries,
            base_delay_seconds=base_delay_seconds,
            sleep=sleep,
        )

    @staticmethod
    def _to_response(response: Any, requested_model: str) -> LLMResponse:
        """Convert a LiteLLM ModelResponse to LLMResponse."""
        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        return LLMResponse(
            text=content or "",
            model=getattr(response, "model", None) or requested_model,
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
        )
