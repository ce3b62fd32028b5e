"""Helper functions for use cases."""

import re

_MENTION = re.compile(r"<@!?([A-Z0-9]+)(?:\|[^>]*)?>")


def strip_mentions(text: str) -> str:
    """Remove user mentions (``<@U123>``) from message text."""
    return _MENTION.sub("", text).strip()


def split_message(text: str, max_length: int) -> list[str]:
    """Split a long reply into chunks no longer than ``max_length``.

    Splits at the last newline before the limit, or at the last space when
    the newline would leave the chunk less than half full; words longer
    than the limit are cut hard. Leading whitespace of each following
    chunk is dropped.

    Args:
        text: Reply text.
        max_length: Maximum characters per chunk.

    Returns:
        Chunks in order (a single chunk when the text already fits).
    """
    chunks: list[str] = []
    remaining = text
    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        split_index = remaining.rfind("\n", 0, max_length)
        if split_index == -1 or split_index < max_length * 0.5:
            split_index = remaining.rfind(" ", 0, max_length)
        if split_index <= 0:
            split_index = max_length

        chunks.append(remaining[:split_index])
        remaining = remaining[split_index:].lstrip()
    return chunks
