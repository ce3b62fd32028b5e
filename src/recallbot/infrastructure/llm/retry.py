"""Rate-limit retry for completion calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from litellm.exceptions import RateLimitError

from recallbot.infrastructure.llm.exceptions import LLMRateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_MARKERS = ("429", "rate_limit", "rate limit")


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether an error means the completion service is rate limiting us.

    Args:
        error: Exception raised by a completion call.

    Returns:
        True for rate-limit errors, False for everything else.
    """
    if isinstance(error, (LLMRateLimitError, RateLimitError)):
        return True
    text = str(error).lower()
    return any(marker in text for marker in RATE_LIMIT_MARKERS)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    label: str,
    max_retries: int = 3,
    base_delay_seconds: float = 10.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run a completion call, retrying with exponential backoff on rate limits.

    The operation is attempted at most ``max_retries + 1`` times. Before
    retry number ``n`` (0-based attempt that failed) the call sleeps
    ``base_delay_seconds * 2**n``. Errors that are not rate limits propagate
    on the first attempt, and the last rate-limit error propagates once the
    retries are exhausted.

    Interactive call sites use a short base delay; background batch work
    can afford a longer one.

    Args:
        operation: Zero-argument coroutine function performing one call.
        label: Call site name used in log messages.
        max_retries: Number of retries after the first attempt.
        base_delay_seconds: Wait before the first retry.
        sleep: Sleep function (injectable for tests).

    Returns:
        The operation's result.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_rate_limit_error(e) or attempt >= max_retries:
                raise
            delay = base_delay_seconds * 2**attempt
            logger.warning(
                "[%s] Rate limited (attempt %d/%d), retrying in %.1fs",
                label,
                attempt + 1,
                max_retries + 1,
                delay,
            )
            await sleep(delay)
            attempt += 1
