"""Query mode classification."""

import re

from recallbot.domain.entities import QueryMode

RECALL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"every\s+time",
        r"all\s+the\s+times",
        r"how\s+many\s+times",
        r"list\s+every",
        r"show\s+me\s+all",
        r"give\s+me\s+(all|every)",
        r"list\s+all",
        r"how\s+often",
        r"find\s+(every|all)",
    )
)


def classify_mode(question: str) -> QueryMode:
    """質問文から回答モードを判定する

    網羅的な列挙を求める言い回し（"how many times", "list all" など）を
    含む場合は RECALL、それ以外は DEFAULT。大文字小文字と語間の空白量は
    区別しない。純粋関数で、空文字列は DEFAULT になる。

    Args:
        question: 質問文

    Returns:
        回答モード
    """
    if any(pattern.search(question) for pattern in RECALL_PATTERNS):
        return QueryMode.RECALL
    return QueryMode.DEFAULT


def strip_recall_phrasing(question: str) -> str:
    """質問文から網羅要求の言い回しを取り除く

    "how many times" などは検索語にならないため、検索前に除去する。
    残りの語間の空白は 1 つにまとめる。

    Args:
        question: 質問文

    Returns:
        言い回しを除いた質問文
    """
    for pattern in RECALL_PATTERNS:
        question = pattern.sub(" ", question)
    return " ".join(question.split())
