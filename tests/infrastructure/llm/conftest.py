"""Common fixtures for LLM infrastructure tests."""

import pytest

from recallbot.config import LLMConfig, PersonaConfig


@pytest.fixture
def llm_config() -> LLMConfig:
    """Create LLM config."""
    return LLMConfig(model="gpt-4o-mini", temperature=0.7, max_tokens=1000)


@pytest.fixture
def persona_config() -> PersonaConfig:
    """Create test persona config."""
    return PersonaConfig(name="archivist", system_prompt="You remember everything.")

