"""Parsing of "summarize" / "tl;dr" requests."""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

_SUMMARIZE = re.compile(r"summarize|tldr|tl;dr", re.IGNORECASE)
_TODAY = re.compile(r"today", re.IGNORECASE)
_YESTERDAY = re.compile(r"yesterday", re.IGNORECASE)
_THIS_WEEK = re.compile(r"this\s+week|the\s+week", re.IGNORECASE)
_LAST_RANGE = re.compile(r"last\s+(\d+)\s+(hour|day|week|month)s?", re.IGNORECASE)
_GUILD_WIDE = re.compile(r"server|all\s+channels", re.IGNORECASE)

# Longest lookback per unit (ten years); larger amounts are clamped.
_MAX_AMOUNT = {"hour": 87600, "day": 3650, "week": 520, "month": 120}


@dataclass(frozen=True)
class SummarizeRequest:
    """A request to summarize recent conversation.

    Attributes:
        since: Start of the timeframe.
        label: Human-readable timeframe ("today", "the last 3 hour(s)").
        guild_wide: Summarize every channel instead of the current one.
    """

    since: datetime
    label: str
    guild_wide: bool = False


def is_summarize_request(question: str) -> bool:
    """Check whether a question asks for a summary."""
    return _SUMMARIZE.search(question) is not None


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_summarize_request(question: str, now: datetime) -> SummarizeRequest | None:
    """Work out the timeframe and scope of a summarize request.

    Timeframes: today, yesterday, this week (weeks start on Sunday) and
    "last N hours/days/weeks/months", with N capped at ten years. A bare
    "summarize" or "tldr" means today. The current channel is summarized
    unless "server" or "all channels" is mentioned.

    Args:
        question: Question text.
        now: Current time; day boundaries are taken in its timezone.

    Returns:
        The parsed request, or None if the question is not a summarize request.
    """
    if not is_summarize_request(question):
        return None

    guild_wide = _GUILD_WIDE.search(question) is not None

    if _TODAY.search(question):
        return SummarizeRequest(_start_of_day(now), "today", guild_wide)

    if _YESTERDAY.search(question):
        return SummarizeRequest(
            _start_of_day(now - timedelta(days=1)), "yesterday", guild_wide
        )

    if _THIS_WEEK.search(question):
        days_since_sunday = (now.weekday() + 1) % 7
        return SummarizeRequest(
            _start_of_day(now - timedelta(days=days_since_sunday)),
            "this week",
            guild_wide,
        )

    match = _LAST_RANGE.search(question)
    if match:
        unit = match.group(2).lower()
        amount = min(int(match.group(1)), _MAX_AMOUNT[unit])
        if unit == "hour":
            since = now - timedelta(hours=amount)
        elif unit == "day":
            since = now - timedelta(days=amount)
        elif unit == "week":
            since = now - timedelta(weeks=amount)
        else:
            since = _months_before(now, amount)
        return SummarizeRequest(since, f"the last {amount} {unit}(s)", guild_wide)

    return SummarizeRequest(_start_of_day(now), "today", guild_wide)
