"""LLM-based user profile analysis."""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from recallbot.config import PersonaConfig, ProfileConfig
from recallbot.domain.entities import Message, UserProfile
from recallbot.infrastructure.llm.client import LLMClient
from recallbot.infrastructure.llm.system_prompts import SystemPrompts
from recallbot.infrastructure.llm.templates import create_jinja_env

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _optional_string(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_profile_analysis(text: str) -> dict[str, Any] | None:
    """Extract the JSON object from a profile analysis reply.

    The model may wrap the object in prose or a code fence, so the span
    from the first ``{`` to the last ``}`` is decoded.

    Returns:
        The decoded object, or None when no JSON object can be read.
    """
    match = _JSON_OBJECT.search(text)
    if match is None:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class LLMProfileAnalyzer:
    """Builds a UserProfile from a user's recent messages.

    Profile calls carry hundreds of messages each, so they retry rate
    limits with a much longer base delay than interactive answers.
    """

    def __init__(
        self,
        client: LLMClient,
        persona: PersonaConfig,
        config: ProfileConfig,
        system_prompts: SystemPrompts,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the analyzer.

        Args:
            client: LLM client for profile analysis.
            persona: Persona whose name appears in the analysis prompt.
            config: Retry policy and output ceiling for profile calls.
            system_prompts: Operator override for the analysis prompt.
            now: Current time (injectable for tests).
        """
        self._client = client
        self._persona = persona
        self._config = config
        self._system_prompts = system_prompts
        self._now = now
        self._jinja_env = create_jinja_env()

    async def analyze(
        self,
        user_id: str,
        guild_id: str,
        user_name: str,
        messages: list[Message],
    ) -> UserProfile:
        """Analyze a user's messages.

        A reply that is not valid JSON still yields a profile (with no
        content) so the user is not re-analyzed until it goes stale.

        Args:
            user_id: User being profiled.
            guild_id: Guild the messages belong to.
            user_name: Name shown to the model.
            messages: The user's recent messages, newest first.

        Returns:
            Profile stamped with the analysis time and message count.

        Raises:
            LLMError: If the completion fails after retries.
        """
        system_prompt = await self._system_prompts.profile_prompt(
            self._jinja_env.get_template("profile_analysis_system.j2").render(
                persona_name=self._persona.name
            )
        )
        user_prompt = self._jinja_env.get_template(
            "profile_analysis_prompt.j2"
        ).render(user_name=user_name, messages=messages)

        response = await self._client.complete_with_retry(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "profile",
            max_retries=self._config.max_retries,
            base_delay_seconds=self._config.retry_base_delay_seconds,
            call_type="profile",
            max_tokens=self._config.max_tokens,
        )

        data = parse_profile_analysis(response.text)
        if data is None:
            logger.error(
                "Failed to parse profile analysis for %s: %.200s",
                user_id,
                response.text,
            )
            data = {}

        return UserProfile(
            user_id=user_id,
            guild_id=guild_id,
            summary=_optional_string(data.get("summary")),
            personality_traits=_string_list(data.get("personality_traits")),
            favorite_games=_string_list(data.get("favorite_games")),
            favorite_topics=_string_list(data.get("favorite_topics")),
            communication_style=_optional_string(data.get("communication_style")),
            notable_quotes=_string_list(data.get("notable_quotes")),
            analyzed_at=self._now(),
            message_count_analyzed=len(messages),
        )
