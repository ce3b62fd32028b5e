"""Query log entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryLogEntry:
    """Record of one answered question.

    Attributes:
        guild_id: Workspace the question was asked in.
        channel_id: Channel the question was asked in.
        asking_user_id: User who asked.
        question: Question text (follow-ups are prefixed with ``[follow-up]``).
        answer: Answer text that was sent.
        model: Model that produced the answer.
        input_tokens: Prompt tokens, if reported.
        output_tokens: Completion tokens, if reported.
        response_time_ms: Wall time from receipt to reply.
    """

    guild_id: str
    channel_id: str
    asking_user_id: str
    question: str
    answer: str
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    response_time_ms: int | None = None
