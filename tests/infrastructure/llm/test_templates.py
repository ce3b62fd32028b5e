"""Tests for template utilities."""

from datetime import datetime, timezone

from recallbot.infrastructure.llm.templates import (
    create_jinja_env,
    format_count,
    format_date,
    format_timestamp,
)


class TestFilters:
    """Filter function tests."""

    def test_format_timestamp(self) -> None:
        """Timestamps render as date and minutes."""
        moment = datetime(2024, 3, 5, 14, 7, 59, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-03-05 14:07"

    def test_format_date(self) -> None:
        """Dates render as ISO dates; missing dates as unknown."""
        assert format_date(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "2024-03-05"
        assert format_date(None) == "unknown"

    def test_format_count(self) -> None:
        """Counts get thousands separators."""
        assert format_count(1234567) == "1,234,567"


class TestEnvironment:
    """create_jinja_env tests."""

    def test_templates_load(self) -> None:
        """Every prompt template can be loaded."""
        env = create_jinja_env()
        for name in (
            "query_user_prompt.j2",
            "follow_up_prompt.j2",
            "continuation_check.j2",
            "summarize_system.j2",
            "summarize_prompt.j2",
        ):
            assert env.get_template(name) is not None

    def test_filters_registered(self) -> None:
        """Custom filters are available to templates."""
        env = create_jinja_env()
        assert env.from_string("{{ 1200 | thousands }}").render() == "1,200"
