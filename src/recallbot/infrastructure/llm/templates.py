"""Jinja2 template utilities for LLM components."""

from datetime import datetime

from jinja2 import Environment, PackageLoader, select_autoescape


def format_timestamp(timestamp: datetime) -> str:
    """Format datetime to readable string.

    Args:
        timestamp: datetime object.

    Returns:
        Formatted string in YYYY-MM-DD HH:MM format.
    """
    return timestamp.strftime("%Y-%m-%d %H:%M")


def format_date(timestamp: datetime | None) -> str:
    """Format datetime as a date, or "unknown" when missing."""
    if timestamp is None:
        return "unknown"
    return timestamp.strftime("%Y-%m-%d")


def format_time(timestamp: datetime) -> str:
    """Format datetime as a time of day (HH:MM)."""
    return timestamp.strftime("%H:%M")


def format_count(value: int) -> str:
    """Format an integer with thousands separators."""
    return f"{value:,}"


def create_jinja_env() -> Environment:
    """Create Jinja2 environment for LLM templates.

    Creates a configured Jinja2 environment that loads templates from
    the recallbot.infrastructure.llm.templates package.

    Returns:
        Configured Jinja2 environment.
    """
    env = Environment(
        loader=PackageLoader("recallbot.infrastructure.llm", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["timestamp"] = format_timestamp
    env.filters["date"] = format_date
    env.filters["time"] = format_time
    env.filters["thousands"] = format_count
    return env
