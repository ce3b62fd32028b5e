"""LLM integration."""

from recallbot.infrastructure.llm.client import LLMClient, LLMResponse
from recallbot.infrastructure.llm.continuation_classifier import (
    LLMContinuationClassifier,
)
from recallbot.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMRateLimitError,
)
from recallbot.infrastructure.llm.profile_analyzer import (
    LLMProfileAnalyzer,
    parse_profile_analysis,
)
from recallbot.infrastructure.llm.response_generator import LiteLLMAnswerGenerator
from recallbot.infrastructure.llm.retry import call_with_retry, is_rate_limit_error
from recallbot.infrastructure.llm.system_prompts import (
    SystemPrompts,
    build_instructions_block,
    parse_custom_instructions,
)
from recallbot.infrastructure.llm.usage_tracker import UsageTracker

__all__ = [
    "LLMAuthenticationError",
    "LLMClient",
    "LLMContinuationClassifier",
    "LLMError",
    "LLMProfileAnalyzer",
    "LLMRateLimitError",
    "LLMResponse",
    "LiteLLMAnswerGenerator",
    "SystemPrompts",
    "UsageTracker",
    "build_instructions_block",
    "call_with_retry",
    "is_rate_limit_error",
    "parse_custom_instructions",
    "parse_profile_analysis",
]
