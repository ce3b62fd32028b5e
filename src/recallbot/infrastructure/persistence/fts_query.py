"""Full-text query building."""

import re
from collections.abc import Iterable

MAX_QUERY_TERMS = 10

# Question scaffolding that never identifies what a message is about.
STOPWORDS = frozenset(
    """
    about after again all also and any anyone are asked ask been before being
    but can could did does doing done each even ever every everyone find for
    from get give got had has have her him his how into its just know last
    let like list many mention mentioned mentioning mentions more most much
    not off often one our out over said say saying says see she show should
    some someone something talk talked talking tell than that the their them
    then there these they this those time times told too used very was were
    what when where which who whom whose why will with would you your
    """.split()
)


def build_fts_query(question: str, exclude: Iterable[str] = ()) -> str:
    """Build a conservative FTS5 query string from free text.

    Hyphens and slashes become separators, tokens of three or more word
    characters are lower-cased and quoted so user text can never be read
    as FTS5 syntax. Stopwords, excluded words and repeats are dropped and
    the first ten remaining terms are OR-joined.

    Args:
        question: Free text (usually the sanitized question).
        exclude: Extra words to leave out, such as the names of the
            author the search is already restricted to.

    Returns:
        FTS5 MATCH expression, or "" when there is nothing to search for.
    """
    text = (question or "").strip()
    if not text:
        return ""

    skipped = STOPWORDS | {word.lower() for word in exclude}
    text = re.sub(r"[-/]+", " ", text)
    words: list[str] = []
    for word in re.findall(r"[A-Za-z0-9_]{3,}", text.lower()):
        if word in skipped or word in words:
            continue
        words.append(word)
        if len(words) == MAX_QUERY_TERMS:
            break
    if not words:
        return ""

    return " OR ".join(f'"{word}"' for word in words)
