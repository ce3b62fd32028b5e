"""Query mode."""

from enum import Enum


class QueryMode(Enum):
    """How a question is answered.

    DEFAULT answers from the most relevant evidence. RECALL answers
    exhaustive-enumeration questions ("how many times", "list all") from an
    aggregate count, a monthly histogram and evenly spaced samples.
    """

    DEFAULT = "default"
    RECALL = "recall"
