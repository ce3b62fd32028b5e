"""Token usage tracking."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recallbot.domain.repositories import UsageRepository

if TYPE_CHECKING:
    from recallbot.infrastructure.llm.client import LLMResponse

logger = logging.getLogger(__name__)

CALL_TYPES = frozenset(
    {
        "query",
        "followup_check",
        "followup_response",
        "summarize",
        "profile",
        "admin_chat",
    }
)


class UsageTracker:
    """Records the token usage of each completion call.

    Tracking is best-effort: storage failures are logged and never reach
    the caller.
    """

    def __init__(self, repository: UsageRepository) -> None:
        self._repository = repository

    async def track(self, call_type: str, response: LLMResponse) -> None:
        """Record usage of one call.

        Args:
            call_type: Usage category.
            response: Completion result carrying model and token counts.
        """
        if call_type not in CALL_TYPES:
            logger.warning("Unknown call type for usage tracking: %s", call_type)
        try:
            await self._repository.record(
                call_type,
                response.model,
                response.input_tokens or 0,
                response.output_tokens or 0,
            )
        except Exception as e:
            logger.error("Failed to track API usage (call_type=%s): %s", call_type, e)
