"""Tests for build_fts_query."""

from recallbot.infrastructure.persistence import build_fts_query


class TestBuildFtsQuery:
    """build_fts_query tests."""

    def test_or_joins_quoted_terms(self) -> None:
        """Terms are lower-cased, quoted and OR-joined."""
        assert build_fts_query("Alice Minecraft") == '"alice" OR "minecraft"'

    def test_short_tokens_dropped(self) -> None:
        """Tokens shorter than three characters are ignored."""
        assert build_fts_query("is it on ice") == '"ice"'

    def test_hyphen_and_slash_split_words(self) -> None:
        """Hyphens and slashes act as separators."""
        assert build_fts_query("co-op/pvp") == '"pvp"'
        assert build_fts_query("real-time raid") == '"real" OR "raid"'

    def test_operators_are_quoted(self) -> None:
        """FTS5 keywords and syntax in user text are neutralized."""
        assert build_fts_query('NEAR "col" OR*') == '"near" OR "col"'

    def test_question_scaffolding_dropped(self) -> None:
        """Recall phrasing and filler words are not search terms."""
        assert (
            build_fts_query("how many times did alice mention minecraft")
            == '"alice" OR "minecraft"'
        )
        assert build_fts_query("what did they say about that") == ""

    def test_excluded_words_dropped(self) -> None:
        """Excluded words are matched case-insensitively."""
        assert build_fts_query("Alice minecraft", exclude=["ALICE"]) == '"minecraft"'

    def test_repeated_terms_collapse(self) -> None:
        """Each term appears once."""
        assert build_fts_query("raid Raid RAID boss") == '"raid" OR "boss"'

    def test_capped_at_ten_terms(self) -> None:
        """At most ten terms are used."""
        words = " ".join(f"word{i}" for i in range(15))
        assert build_fts_query(words).count(" OR ") == 9

    def test_empty(self) -> None:
        """Nothing searchable yields an empty query."""
        assert build_fts_query("") == ""
        assert build_fts_query("?! a b") == ""
