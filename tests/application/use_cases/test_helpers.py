"""Tests for use case helper functions."""

from recallbot.application.use_cases.helpers import split_message, strip_mentions


class TestStripMentions:
    """strip_mentions tests."""

    def test_leading_mention(self) -> None:
        """The bot mention is removed."""
        assert strip_mentions("<@UBOT> who won?") == "who won?"

    def test_labelled_and_trailing_mentions(self) -> None:
        """Labelled mentions and surrounding whitespace are removed."""
        assert strip_mentions("<@U1|bob> hey <@U2>") == "hey"

    def test_mention_only(self) -> None:
        """A bare mention leaves an empty question."""
        assert strip_mentions("  <@UBOT>  ") == ""

    def test_no_mentions(self) -> None:
        """Plain text is only stripped."""
        assert strip_mentions(" hello ") == "hello"


class TestSplitMessage:
    """split_message tests."""

    def test_short_text_single_chunk(self) -> None:
        """Text within the limit is one chunk."""
        assert split_message("hello", 10) == ["hello"]

    def test_empty_text(self) -> None:
        """Empty text has no chunks."""
        assert split_message("", 10) == []

    def test_split_at_newline(self) -> None:
        """A late newline is the preferred split point."""
        assert split_message("line one\nline two", 12) == ["line one", "line two"]

    def test_early_newline_falls_back_to_space(self) -> None:
        """A newline in the first half is ignored in favour of a space."""
        assert split_message("a\nbbbb cccc dddd", 10) == ["a\nbbbb", "cccc dddd"]

    def test_split_at_space(self) -> None:
        """Without newlines the last space is used."""
        assert split_message("aaaa bbbb cccc", 10) == ["aaaa bbbb", "cccc"]

    def test_hard_cut_long_word(self) -> None:
        """Words longer than the limit are cut."""
        assert split_message("x" * 25, 10) == ["x" * 10, "x" * 10, "x" * 5]

    def test_chunks_respect_limit(self) -> None:
        """No chunk exceeds the limit."""
        text = " ".join(f"word{i}" for i in range(500))

        chunks = split_message(text, 100)

        assert all(len(chunk) <= 100 for chunk in chunks)
        assert " ".join(chunks) == text
