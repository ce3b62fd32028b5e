"""Generated answer entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratedAnswer:
    """Answer text produced by the language model, with its cost.

    Attributes:
        text: Answer text.
        model: Model that produced it.
        input_tokens: Prompt tokens, if reported.
        output_tokens: Completion tokens, if reported.
    """

    text: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None
