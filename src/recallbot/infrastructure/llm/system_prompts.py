"""Operator-editable system prompts."""

import json
import logging

from recallbot.domain.repositories import SettingsRepository

logger = logging.getLogger(__name__)

QUERY_PROMPT_KEY = "prompt:QUERY_SYSTEM_PROMPT"
SUMMARIZE_PROMPT_KEY = "prompt:SUMMARIZE_SYSTEM_PROMPT"
PROFILE_PROMPT_KEY = "prompt:PROFILE_ANALYSIS_SYSTEM_PROMPT"
CUSTOM_INSTRUCTIONS_KEY = "custom_instructions"

INSTRUCTIONS_HEADER = "CUSTOM INSTRUCTIONS (from bot owner, follow these):"


def parse_custom_instructions(raw: str | None) -> list[str]:
    """Decode the stored instruction list.

    The value is a JSON array whose items are either plain strings or
    objects with a ``text`` field. Blank items are skipped and anything
    that is not such an array yields no instructions.

    Args:
        raw: Stored value, or None when unset.

    Returns:
        Instruction texts in stored order.
    """
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed %s setting", CUSTOM_INSTRUCTIONS_KEY)
        return []
    if not isinstance(items, list):
        logger.warning("Ignoring malformed %s setting", CUSTOM_INSTRUCTIONS_KEY)
        return []

    texts = []
    for item in items:
        text = item.get("text") if isinstance(item, dict) else item
        if isinstance(text, str) and text.strip():
            texts.append(text.strip())
    return texts


def build_instructions_block(instructions: list[str]) -> str:
    """Render instructions as a block to append to a system prompt."""
    if not instructions:
        return ""
    lines = "".join(f"- {instruction}\n" for instruction in instructions)
    return f"\n\n{INSTRUCTIONS_HEADER}\n{lines}"


class SystemPrompts:
    """Resolves system prompts from the settings store on every call.

    A stored ``prompt:*`` value replaces the built-in prompt, and the
    owner's custom instructions are appended to the query prompt. When
    the store cannot be read the built-in prompt is used.
    """

    def __init__(self, settings_repository: SettingsRepository) -> None:
        self._settings_repository = settings_repository

    async def query_prompt(self, default: str) -> str:
        """Return the system prompt for questions and follow-ups.

        Args:
            default: Built-in prompt used when no override is stored.

        Returns:
            Override or default, followed by the custom instructions block.
        """
        base = await self._read(QUERY_PROMPT_KEY) or default
        instructions = parse_custom_instructions(
            await self._read(CUSTOM_INSTRUCTIONS_KEY)
        )
        return base + build_instructions_block(instructions)

    async def summarize_prompt(self, default: str) -> str:
        """Return the system prompt for summaries."""
        return await self._read(SUMMARIZE_PROMPT_KEY) or default

    async def profile_prompt(self, default: str) -> str:
        """Return the system prompt for profile analysis."""
        return await self._read(PROFILE_PROMPT_KEY) or default

    async def _read(self, key: str) -> str | None:
        try:
            return await self._settings_repository.get(key)
        except Exception as e:
            logger.warning("Failed to read setting %s, using default: %s", key, e)
            return None
