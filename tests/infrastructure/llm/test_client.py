"""Tests for LLMClient."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from litellm.exceptions import AuthenticationError, RateLimitError

from recallbot.config import LLMConfig
from recallbot.infrastructure.llm import (
    LLMAuthenticationError,
    LLMClient,
    LLMError,
    LLMRateLimitError,
    LLMResponse,
)


def make_response(content: str | None = "Hello!") -> MagicMock:
    """Create a mock LiteLLM response."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.model = "gpt-4o-mini"
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 3
    return response


def rate_limit_error() -> RateLimitError:
    """Create a LiteLLM rate limit error."""
    return RateLimitError(
        message="Rate limit exceeded", llm_provider="openai", model="gpt-4o-mini"
    )


async def no_sleep(delay: float) -> None:
    """Sleep stub."""


class TestComplete:
    """LLMClient.complete tests."""

    @pytest.fixture
    def client(self, llm_config: LLMConfig) -> LLMClient:
        """Create LLMClient instance."""
        return LLMClient(config=llm_config)

    async def test_complete_success(self, client: LLMClient) -> None:
        """Test successful completion."""
        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=make_response())
        ) as mock_completion:
            result = await client.complete([{"role": "user", "content": "Hello"}])

        assert result == LLMResponse(
            text="Hello!", model="gpt-4o-mini", input_tokens=12, output_tokens=3
        )
        mock_completion.assert_awaited_once()

    async def test_complete_applies_config(self, client: LLMClient) -> None:
        """Test that config parameters are applied."""
        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=make_response())
        ) as mock_completion:
            await client.complete([{"role": "user", "content": "Hello"}])

        call_kwargs = mock_completion.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["temperature"] == 0.7
        assert call_kwargs["max_tokens"] == 1000

    async def test_complete_kwargs_override(self, client: LLMClient) -> None:
        """Test that kwargs can override config."""
        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=make_response())
        ) as mock_completion:
            await client.complete([{"role": "user", "content": "Hi"}], max_tokens=5)

        assert mock_completion.call_args.kwargs["max_tokens"] == 5

    async def test_empty_content_becomes_empty_text(self, client: LLMClient) -> None:
        """Test that a missing completion yields empty text."""
        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=make_response(None))
        ):
            result = await client.complete([{"role": "user", "content": "Hello"}])

        assert result.text == ""

    async def test_authentication_error(self, client: LLMClient) -> None:
        """Test that authentication errors are converted."""
        error = AuthenticationError(
            message="Invalid API key", llm_provider="openai", model="gpt-4o-mini"
        )
        with patch("litellm.acompletion", new=AsyncMock(side_effect=error)):
            with pytest.raises(LLMAuthenticationError):
                await client.complete([{"role": "user", "content": "Hello"}])

    async def test_rate_limit_error(self, client: LLMClient) -> None:
        """Test that rate limit errors are converted."""
        with patch(
            "litellm.acompletion", new=AsyncMock(side_effect=rate_limit_error())
        ):
            with pytest.raises(LLMRateLimitError):
                await client.complete([{"role": "user", "content": "Hello"}])

    async def test_generic_error(self, client: LLMClient) -> None:
        """Test that other errors are converted."""
        with patch(
            "litellm.acompletion", new=AsyncMock(side_effect=Exception("boom"))
        ):
            with pytest.raises(LLMError):
                await client.complete([{"role": "user", "content": "Hello"}])


class TestUsageTracking:
    """Usage tracking tests."""

    async def test_tracks_when_call_type_given(self, llm_config: LLMConfig) -> None:
        """Test that usage is recorded under the call type."""
        tracker = AsyncMock()
        client = LLMClient(llm_config, usage_tracker=tracker)

        with patch("litellm.acompletion", new=AsyncMock(return_value=make_response())):
            result = await client.complete(
                [{"role": "user", "content": "Hi"}], call_type="query"
            )

        tracker.track.assert_awaited_once_with("query", result)

    async def test_no_tracking_without_call_type(self, llm_config: LLMConfig) -> None:
        """Test that untyped calls are not recorded."""
        tracker = AsyncMock()
        client = LLMClient(llm_config, usage_tracker=tracker)

        with patch("litellm.acompletion", new=AsyncMock(return_value=make_response())):
            await client.complete([{"role": "user", "content": "Hi"}])

        tracker.track.assert_not_awaited()


class TestCompleteWithRetry:
    """LLMClient.complete_with_retry tests."""

    async def test_retries_rate_limits(self, llm_config: LLMConfig) -> None:
        """Test that a rate-limited call is retried until it succeeds."""
        client = LLMClient(llm_config)
        sleep = AsyncMock()
        mock_completion = AsyncMock(
            side_effect=[rate_limit_error(), rate_limit_error(), make_response()]
        )

        with patch("litellm.acompletion", new=mock_completion):
            result = await client.complete_with_retry(
                [{"role": "user", "content": "Hi"}],
                "query",
                max_retries=3,
                base_delay_seconds=1.0,
                sleep=sleep,
            )

        assert result.text == "Hello!"
        assert mock_completion.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    async def test_passes_overrides_through(self, llm_config: LLMConfig) -> None:
        """Test that keyword overrides reach the completion call."""
        client = LLMClient(llm_config)
        mock_completion = AsyncMock(return_value=make_response())

        with patch("litellm.acompletion", new=mock_completion):
            await client.complete_with_retry(
                [{"role": "user", "content": "Hi"}],
                "followup-check",
                sleep=no_sleep,
                max_tokens=5,
            )

        assert mock_completion.call_args.kwargs["max_tokens"] == 5
