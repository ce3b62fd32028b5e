"""Tests for LiteLLMAnswerGenerator."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from recallbot.config import PersonaConfig, QueryConfig, RetryConfig
from recallbot.domain.entities import (
    ArchiveStats,
    Channel,
    ConversationTurn,
    Message,
    MonthlyCount,
    ProfileSummary,
    QueryContext,
    QueryMode,
    RecallData,
    RecentMessage,
    ReferencedLink,
    RelevantMessage,
    TurnRole,
    User,
)
from recallbot.infrastructure.llm import (
    LiteLLMAnswerGenerator,
    LLMResponse,
    SystemPrompts,
)

TIMESTAMP = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def client() -> AsyncMock:
    """Create a mock LLMClient."""
    client = AsyncMock()
    client.complete_with_retry.return_value = LLMResponse(
        text="alice won", model="gpt-4o-mini", input_tokens=900, output_tokens=4
    )
    return client


@pytest.fixture
def settings_repository() -> AsyncMock:
    """Settings store with nothing stored."""
    repository = AsyncMock()
    repository.get.return_value = None
    return repository


@pytest.fixture
def generator(
    client: AsyncMock, persona_config: PersonaConfig, settings_repository: AsyncMock
) -> LiteLLMAnswerGenerator:
    """Create generator with default settings."""
    return LiteLLMAnswerGenerator(
        client,
        persona_config,
        QueryConfig(),
        RetryConfig(max_retries=2),
        SystemPrompts(settings_repository),
    )


def relevant(content: str, author: str = "alice") -> RelevantMessage:
    """Create a RelevantMessage."""
    return RelevantMessage(
        author=author, content=content, timestamp=TIMESTAMP, channel="general"
    )


class TestGenerate:
    """generate tests."""

    async def test_returns_generated_answer(
        self, generator: LiteLLMAnswerGenerator
    ) -> None:
        """The completion result becomes a GeneratedAnswer."""
        answer = await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)

        assert answer.text == "alice won"
        assert answer.model == "gpt-4o-mini"
        assert answer.input_tokens == 900
        assert answer.output_tokens == 4

    async def test_messages_use_persona_system_prompt(
        self, generator: LiteLLMAnswerGenerator, client: AsyncMock
    ) -> None:
        """The persona prompt is the system message and the question is sent."""
        await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)

        messages = client.complete_with_retry.call_args.args[0]
        assert messages[0] == {"role": "system", "content": "You remember everything."}
        assert messages[1]["role"] == "user"
        assert "**Question:** who won?" in messages[1]["content"]

    async def test_stored_prompt_and_custom_instructions(
        self,
        generator: LiteLLMAnswerGenerator,
        client: AsyncMock,
        settings_repository: AsyncMock,
    ) -> None:
        """A stored prompt replaces the persona and instructions are appended."""
        stored = {
            "prompt:QUERY_SYSTEM_PROMPT": "Be brief.",
            "custom_instructions": '[{"text": "Never use emoji", "source": "dm"}]',
        }
        settings_repository.get.side_effect = stored.get

        await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)

        system = client.complete_with_retry.call_args.args[0][0]["content"]
        assert system == (
            "Be brief.\n\n"
            "CUSTOM INSTRUCTIONS (from bot owner, follow these):\n"
            "- Never use emoji\n"
        )

    async def test_settings_are_read_per_call(
        self,
        generator: LiteLLMAnswerGenerator,
        client: AsyncMock,
        settings_repository: AsyncMock,
    ) -> None:
        """Clearing the override takes effect on the next question."""
        settings_repository.get.side_effect = {
            "prompt:QUERY_SYSTEM_PROMPT": "Be brief."
        }.get
        await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)
        settings_repository.get.side_effect = None
        await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)

        first, second = client.complete_with_retry.call_args_list
        assert first.args[0][0]["content"] == "Be brief."
        assert second.args[0][0]["content"] == "You remember everything."

    async def test_default_mode_options(
        self, generator: LiteLLMAnswerGenerator, client: AsyncMock
    ) -> None:
        """Default answers use the default ceiling and query category."""
        await generator.generate("who won?", QueryContext(), QueryMode.DEFAULT)

        call = client.complete_with_retry.call_args
        assert call.args[1] == "query"
        assert call.kwargs["max_tokens"] == 1500
        assert call.kwargs["call_type"] == "query"
        assert call.kwargs["max_retries"] == 2
        assert call.kwargs["base_delay_seconds"] == 10.0

    async def test_recall_mode_ceiling(
        self, generator: LiteLLMAnswerGenerator, client: AsyncMock
    ) -> None:
        """Recall answers get the larger ceiling."""
        await generator.generate("list all", QueryContext(), QueryMode.RECALL)

        assert client.complete_with_retry.call_args.kwargs["max_tokens"] == 4000

    async def test_follow_up_options_and_history(
        self, generator: LiteLLMAnswerGenerator, client: AsyncMock
    ) -> None:
        """Follow-ups include prior turns and use their own category."""
        history = [
            ConversationTurn(TurnRole.ASKER, "who won?"),
            ConversationTurn(TurnRole.ASSISTANT, "alice won"),
        ]

        await generator.generate(
            "who came second?", QueryContext(), QueryMode.DEFAULT, history=history
        )

        call = client.complete_with_retry.call_args
        prompt = call.args[0][1]["content"]
        assert call.args[1] == "followup"
        assert call.kwargs["call_type"] == "followup_response"
        assert prompt.startswith("**Prior conversation with this user:**")
        assert "User: who won?" in prompt
        assert "archivist: alice won" in prompt
        assert "**Question:** who came second?" in prompt


class TestBuildUserPrompt:
    """build_user_prompt tests."""

    def test_minimal_prompt(self, generator: LiteLLMAnswerGenerator) -> None:
        """An empty context renders only the question and tone instruction."""
        prompt = generator.build_user_prompt("hello?", QueryContext())

        assert "**Question:** hello?" in prompt
        assert "group chat" in prompt
        assert "**Your Archive:**" not in prompt
        assert "RECALL DATA" not in prompt

    def test_full_context(self, generator: LiteLLMAnswerGenerator) -> None:
        """Every context section is rendered."""
        context = QueryContext(
            archive_stats=ArchiveStats(
                total_messages=12345,
                earliest=datetime(2022, 1, 1, tzinfo=timezone.utc),
                latest=TIMESTAMP,
                unique_authors=42,
            ),
            recent_conversation=[
                RecentMessage(author="bob", content="gg", timestamp=TIMESTAMP)
            ],
            relevant_messages=[relevant("I love minecraft")],
            user_profiles=[
                ProfileSummary(
                    username="alice",
                    summary="Redstone engineer.",
                    traits=["patient"],
                    games=["Minecraft"],
                    quotes=["one", "two", "three"],
                )
            ],
            referenced_links=[
                ReferencedLink(
                    url="https://example.com",
                    summary="Patch notes",
                    author="carol",
                    timestamp=TIMESTAMP,
                )
            ],
        )

        prompt = generator.build_user_prompt("what about alice?", context)

        assert "12,345 messages from 2022-01-01 to 2024-03-05, 42 users" in prompt
        assert "[2024-03-05 14:30] bob: gg" in prompt
        assert "[2024-03-05] #general | **alice**: I love minecraft" in prompt
        assert (
            "- **alice**: Redstone engineer. | Traits: patient | Games: Minecraft"
            ' | Quotes: "one", "two"'
        ) in prompt
        assert "three" not in prompt
        assert "carol shared: https://example.com" in prompt
        assert "-> Patch notes" in prompt

    def test_recall_data(self, generator: LiteLLMAnswerGenerator) -> None:
        """Recall data replaces the casual instruction."""
        context = QueryContext(
            recall_data=RecallData(
                total_count=47,
                monthly_breakdown=[
                    MonthlyCount("2024-01", 20),
                    MonthlyCount("2024-02", 27),
                ],
                samples=[relevant("minecraft again")],
                target_user="alice",
            )
        )

        prompt = generator.build_user_prompt("how many times", context)

        assert "Total matches found: 47 (from alice)" in prompt
        assert "Monthly breakdown: 2024-01: 20, 2024-02: 27" in prompt
        assert "#general | alice: minecraft again" in prompt
        assert "Report the count" in prompt
        assert "group chat" not in prompt


class TestSummarize:
    """summarize tests."""

    async def test_summarize(
        self, generator: LiteLLMAnswerGenerator, client: AsyncMock
    ) -> None:
        """The transcript and timeframe are sent with the summary options."""
        messages = [
            Message(
                id="1",
                guild_id="T1",
                channel=Channel(id="C1", name="general"),
                user=User(id="U1", name="alice01", display_name="Alice"),
                text="raid at 9",
                timestamp=TIMESTAMP,
            )
        ]

        answer = await generator.summarize(messages, "today")

        call = client.complete_with_retry.call_args
        system, user = call.args[0]
        assert "You are archivist" in system["content"]
        assert "from today" in user["content"]
        assert "[14:30] #general | **Alice**: raid at 9" in user["content"]
        assert call.args[1] == "summarize"
        assert call.kwargs["call_type"] == "summarize"
        assert call.kwargs["max_tokens"] == 500
        assert answer.text == "alice won"

    async def test_stored_summarize_prompt(
        self,
        generator: LiteLLMAnswerGenerator,
        client: AsyncMock,
        settings_repository: AsyncMock,
    ) -> None:
        """A stored summarize prompt replaces the built-in one."""
        settings_repository.get.side_effect = {
            "prompt:SUMMARIZE_SYSTEM_PROMPT": "One line only."
        }.get

        await generator.summarize([], "today")

        system = client.complete_with_retry.call_args.args[0][0]
        assert system == {"role": "system", "content": "One line only."}
