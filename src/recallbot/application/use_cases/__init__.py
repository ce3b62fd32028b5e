"""Application use cases."""

from recallbot.application.use_cases.helpers import split_message, strip_mentions
from recallbot.application.use_cases.query_handler import QueryHandler
from recallbot.application.use_cases.summarize_request import (
    SummarizeRequest,
    is_summarize_request,
    parse_summarize_request,
)

__all__ = [
    "QueryHandler",
    "SummarizeRequest",
    "is_summarize_request",
    "parse_summarize_request",
    "split_message",
    "strip_mentions",
]
