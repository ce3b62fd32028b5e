"""Presentation layer."""

from recallbot.presentation.slack_handlers import register_handlers

__all__ = ["register_handlers"]
